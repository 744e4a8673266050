"""
First-run seed data
Idempotent; safe to run on every start.
"""

from flask import current_app

from app.models.department import Department
from app.models.user import User, UserRole


DEFAULT_DEPARTMENTS = [
    {
        'name': 'Public Works Department (PWD)',
        'description': 'Handles road maintenance, potholes, and infrastructure',
        'categories': ['pothole', 'sidewalk'],
    },
    {
        'name': 'Sanitation Department',
        'description': 'Manages garbage collection and waste management',
        'categories': ['garbage'],
    },
    {
        'name': 'Electricity Board',
        'description': 'Handles streetlights and electrical issues',
        'categories': ['streetlight', 'electricity'],
    },
    {
        'name': 'Water Department',
        'description': 'Manages water supply and drainage systems',
        'categories': ['water', 'drainage'],
    },
    {
        'name': 'Traffic Police',
        'description': 'Handles traffic signals and traffic management',
        'categories': ['traffic'],
    },
    {
        'name': 'General Administration',
        'description': 'Handles miscellaneous complaints',
        'categories': ['other'],
    },
]


def ensure_default_admin(session, config):
    username = config['DEFAULT_ADMIN_USERNAME']
    if User.query.filter_by(username=username).first():
        return None

    admin = User(
        email=config['DEFAULT_ADMIN_EMAIL'],
        username=username,
        password=config['DEFAULT_ADMIN_PASSWORD'],
        role=UserRole.ADMIN,
    )
    session.add(admin)
    current_app.logger.info(f'Default admin user {username!r} created')
    return admin


def ensure_default_departments(session):
    created = []
    for entry in DEFAULT_DEPARTMENTS:
        if Department.query.filter_by(name=entry['name']).first():
            continue
        department = Department(is_active=True, **entry)
        session.add(department)
        created.append(department)

    if created:
        current_app.logger.info(f'Created {len(created)} default departments')
    return created


def ensure_seed_data(session, config):
    """Make sure the default admin and departments exist"""
    admin = ensure_default_admin(session, config)
    departments = ensure_default_departments(session)
    session.commit()
    return admin, departments
