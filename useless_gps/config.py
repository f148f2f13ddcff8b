"""Configuration settings for Useless GPS."""

CONFIG = {
    # Sampling
    "min_samples": 4,
    "max_samples": 12,
    "sample_density_per_km": 2,  # samples per km before clamping
    "min_radius_meters": 120,  # meters
    "max_radius_meters": 900,  # meters
    "radius_divisor": 8,  # route length / divisor = proximity radius
    "coordinate_precision": 6,  # decimals written into the Overpass query
    # Playback
    "playback_speed_factor": 1.5,  # ms of playback per meter of route
    "playback_min_duration_ms": 5000,
    "playback_max_duration_ms": 15000,
    "playback_tick_interval_ms": 30,
    "playback_min_tick_interval_ms": 20,
    "playback_min_steps": 60,
    "trigger_cooldown_ms": 3000,  # minimum gap between two commentary events
    # Scheduled fallback triggers (forced commentary on long empty stretches)
    "scheduled_triggers": True,
    "scheduled_km_per_slot": 10,
    "scheduled_min_slots": 3,
    "scheduled_max_slots": 6,
    # Collaborators
    "overpass_url": "https://overpass-api.de/api/interpreter",
    "overpass_timeout": 25,  # seconds, passed to the Overpass server
    "nominatim_url": "https://nominatim.openstreetmap.org/search",
    "geocode_timeout": 15,  # seconds
    "user_agent": "useless-gps/0.1 (straight-line snark simulator)",
    "fetch_retry_max_time": 10.0,  # seconds - 0 disables retrying
}
