"""
Flask extensions shared across the Kinetic retention engine.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Database (members, activity, predictions, campaigns, recipes)
db = SQLAlchemy()

# Schema migrations
migrate = Migrate()
