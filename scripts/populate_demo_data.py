import csv
import getpass
import os

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.api.users import schemas as user_schemas
from app.api.users.crud import user as user_crud
from app.core.config import settings
from app.core.database import SessionLocal, create_db


def create_registrar(db: Session, username: str, email: str, password: str):
    print('Creating Registrar...')
    registrar = user_crud.get_by_username(db, username)
    if registrar:
        print(f'Registrar already exists: {registrar.id} - {registrar.username}')
        return registrar

    registrar_data = user_schemas.StudentCreate(
        name='Registrar',
        username=username,
        email=email,
        password=password,
    )
    registrar = user_crud.create_user(
        db, registrar_data, role=user_schemas.Role.REGISTRAR
    )
    print(f'Registrar created: {registrar.id} - {registrar.username}')
    return registrar


def read_students_csv(csv_path: str):
    """Read student rows (name, username, email, department, year, gender) from CSV."""
    with open(csv_path, newline='') as csvfile:
        reader = csv.DictReader(csvfile)
        return list(reader)


def get_or_create_student(db: Session, row: dict, password: str):
    username = row['username'].strip()
    student = user_crud.get_by_username(db, username)
    if student:
        print(f'Student already exists: {student.username}')
        return student

    student_data = user_schemas.StudentSignup(
        name=row['name'],
        username=username,
        email=row['email'],
        password=password,
        phone=row.get('phone'),
        department=row['department'],
        year=row['year'],
        gender=row['gender'],
    )
    try:
        student = user_crud.signup(db, obj=student_data)
    except HTTPException as e:
        print(f'Skipping {username}: {e.detail}')
        return None
    print(f'Student created: {student.id} - {student.username} ({student.barcode_id})')
    return student


def main():
    create_db()
    db = SessionLocal()
    try:
        print('\nDatabase Connection Information:')
        print('Database Type: PostgreSQL')
        print(f'Host: {settings.DB_HOST}')
        print(f'Port: {settings.DB_PORT}')
        print(f'Database Name: {settings.DB_NAME}')
        print(f'Username: {settings.DB_USERNAME}')

        print('\nThis script will create demo data in the database:')
        print('1. A Registrar account')
        print('2. Students from students.csv')

        confirm = input('Do you want to proceed? (y/N): ')
        if confirm.lower() != 'y':
            print('Operation cancelled')
            return

        username = input('Registrar username [registrar]: ') or 'registrar'
        email = input('Registrar email [registrar@example.com]: ') or (
            'registrar@example.com'
        )
        password = getpass.getpass('Registrar password: ')
        create_registrar(db, username, email, password)

        student_password = getpass.getpass('Password for demo students: ')
        csv_path = os.path.join(os.path.dirname(__file__), 'students.csv')
        for row in read_students_csv(csv_path):
            get_or_create_student(db, row, student_password)
    finally:
        db.close()


if __name__ == '__main__':
    main()
