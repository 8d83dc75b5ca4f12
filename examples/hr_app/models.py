"""
Tables and entities for the relamap HR example.
"""

from __future__ import annotations

from relamap.core import (
    DateTimeColumn,
    Entity,
    FloatColumn,
    IntegerColumn,
    Property,
    StringColumn,
    Table,
)


class Department(Entity):
    id = Property()
    name = Property()
    location = Property()


class Address(Entity):
    city = Property()
    street = Property()


class Employee(Entity):
    id = Property()
    name = Property()
    job = Property()
    manager = Property("Employee")
    hire_date = Property()
    salary = Property()
    department = Property(Department)
    address = Property(Address)


class Departments(Table):
    id = IntegerColumn(primary_key=True, bind="id")
    name = StringColumn(bind="name", max_length=120)
    location = StringColumn(bind="location")

    class Meta:
        table = "t_department"
        entity = Department


class Employees(Table):
    id = IntegerColumn(primary_key=True, bind="id")
    name = StringColumn(bind="name", max_length=120)
    job = StringColumn(bind="job")
    manager_id = IntegerColumn(bind="manager.id")
    hire_date = DateTimeColumn(bind="hire_date")
    salary = FloatColumn(bind="salary")
    department_id = IntegerColumn(references=Departments, bind="department")
    address_city = StringColumn(bind="address.city")
    address_street = StringColumn(bind="address.street")

    class Meta:
        table = "t_employee"
        entity = Employee


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS t_department (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        location TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS t_employee (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        job TEXT,
        manager_id INTEGER,
        hire_date TIMESTAMP,
        salary REAL,
        department_id INTEGER REFERENCES t_department (id),
        address_city TEXT,
        address_street TEXT
    )
    """,
)
