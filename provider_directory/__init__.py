"""Healthcare provider directory: search, filter and distance ranking of doctors and clinics."""
