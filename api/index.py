"""
Serverless entry point for the Grievance Cell API
"""
import os

# Serverless functions are short-lived; the scheduler would never fire
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("ESCALATION_ENABLED", "false")

from mangum import Mangum
from grievance_cell.main import app

# Lambda handler for the ASGI app
handler = Mangum(app, lifespan="auto")
