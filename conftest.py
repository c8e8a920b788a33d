"""
Root pytest configuration.
Sets the testing environment before any application module reads settings.
"""
import os

os.environ["TESTING"] = "True"
os.environ["DEBUG"] = "False"
os.environ["EMAIL_USE_CELERY"] = "False"
os.environ.setdefault("JWT_SECRET", "test-secret")
