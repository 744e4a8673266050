"""
Department & Officer Directory Service
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.errors import ValidationError, NotFoundError, StorageError
from app.models.complaint import Complaint
from app.models.department import Department
from app.models.enums import ComplaintCategory
from app.models.officer import Officer
from app.utils.validators import require_fields, parse_enum, parse_bool, parse_str


def _as_id(value, field):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer')


class DirectoryService:
    """Reference data: departments and their officers"""

    def __init__(self, session):
        self.session = session

    def _commit(self, action, conflict_message):
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ValidationError(conflict_message, status_code=409)
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f'Database error while trying to {action}: {str(e)}')
            raise StorageError()

    @staticmethod
    def _parse_categories(categories):
        if not isinstance(categories, (list, tuple)):
            raise ValidationError('categories must be a list')
        return [parse_enum(ComplaintCategory, c, 'category').value for c in categories]

    # ------------------------------------------------------------------
    # Departments

    def get_department(self, department_id):
        department = self.session.get(Department, department_id)
        if not department:
            raise NotFoundError('Department not found')
        return department

    def list_departments(self):
        return Department.query.filter_by(is_active=True).order_by(Department.name).all()

    def create_department(self, data):
        require_fields(data, ['name'])

        department = Department(
            name=parse_str(data['name'], 'name'),
            description=parse_str(data.get('description'), 'description'),
            categories=self._parse_categories(data.get('categories') or []),
            is_active=True,
        )
        self.session.add(department)
        self._commit('create department', 'Department name already exists')
        return department

    def update_department(self, department_id, data):
        department = self.get_department(department_id)

        if data.get('name'):
            department.name = parse_str(data['name'], 'name')
        if data.get('description'):
            department.description = parse_str(data['description'], 'description')
        if data.get('categories') is not None:
            department.categories = self._parse_categories(data['categories'])
        if data.get('is_active') is not None:
            department.is_active = parse_bool(data['is_active'], 'is_active')

        self._commit('update department', 'Department name already exists')
        return department

    # ------------------------------------------------------------------
    # Officers

    def get_officer(self, officer_id):
        officer = self.session.get(Officer, officer_id)
        if not officer:
            raise NotFoundError('Officer not found')
        return officer

    def list_officers(self):
        return Officer.query.filter_by(is_active=True).order_by(Officer.name).all()

    def create_officer(self, data):
        require_fields(data, ['name', 'email', 'department_id'])
        department = self.get_department(_as_id(data['department_id'], 'department_id'))

        officer = Officer(
            name=parse_str(data['name'], 'name'),
            email=parse_str(data['email'], 'email'),
            phone=parse_str(data.get('phone'), 'phone'),
            department_id=department.id,
            is_active=True,
        )
        self.session.add(officer)
        self._commit('create officer', 'Officer email already exists')
        return officer

    def update_officer(self, officer_id, data):
        officer = self.get_officer(officer_id)

        if data.get('name'):
            officer.name = parse_str(data['name'], 'name')
        if data.get('email'):
            officer.email = parse_str(data['email'], 'email').lower()
        if data.get('phone'):
            officer.phone = parse_str(data['phone'], 'phone')
        if data.get('department_id'):
            officer.department_id = self.get_department(_as_id(data['department_id'], 'department_id')).id
        if data.get('is_active') is not None:
            officer.is_active = parse_bool(data['is_active'], 'is_active')

        self._commit('update officer', 'Officer email already exists')
        return officer

    def assign_complaint(self, officer_id, complaint_id):
        officer = self.get_officer(officer_id)
        if not complaint_id:
            raise ValidationError('complaint_id is required')
        complaint = self.session.get(Complaint, _as_id(complaint_id, 'complaint_id'))
        if not complaint:
            raise NotFoundError('Complaint not found')

        if complaint not in officer.assigned_complaints:
            officer.assigned_complaints.append(complaint)
            self._commit('assign complaint', 'Complaint already assigned')
        return officer
