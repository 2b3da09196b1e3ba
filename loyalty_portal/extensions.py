"""
Flask extensions initialization.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Database (loyalty settings, clients, bookings, redemptions)
db = SQLAlchemy()

# Migrations
migrate = Migrate()
