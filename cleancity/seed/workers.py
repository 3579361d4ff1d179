# Seed data: default field-worker roster (one per role, central Delhi)

DEFAULT_WORKERS = [
    {"id": "w-san-1", "name": "Asha (Sanitation)", "role": "Sanitation",
     "location": {"lat": 28.6139, "lng": 77.209}, "active": True,
     "phone": "+91-900000001"},

    {"id": "w-plu-1", "name": "Ravi (Plumber)", "role": "Plumber",
     "location": {"lat": 28.62, "lng": 77.22}, "active": True,
     "phone": "+91-900000002"},

    {"id": "w-ele-1", "name": "Neha (Electrician)", "role": "Electrician",
     "location": {"lat": 28.605, "lng": 77.19}, "active": True,
     "phone": "+91-900000003"},

    {"id": "w-gen-1", "name": "Sanjay (General)", "role": "General",
     "location": {"lat": 28.635, "lng": 77.205}, "active": True,
     "phone": "+91-900000004"},
]
