from hypothesis import HealthCheck, settings

# Input generation on a cold start can trip the timing-based health check.
settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")
