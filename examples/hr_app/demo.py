"""
HR example: seed departments and employees, give a raise to one department
and report the hydrated employee graph.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from typing import Any, Dict, List, Optional

from relamap.adapters import SQLiteAdapter
from relamap.persistence import Session, Transaction

from .models import SCHEMA, Address, Department, Departments, Employee, Employees


def bootstrap_session(dsn: Optional[str] = None) -> Session:
    """
    Open a session on ``dsn`` (a temporary SQLite file by default) and
    create the example tables.
    """
    if dsn is None:
        dsn = f"sqlite:///{os.path.join(tempfile.mkdtemp(prefix='relamap-hr-'), 'hr.db')}"
    session = Session(SQLiteAdapter(), dsn=dsn)
    for statement in SCHEMA:
        session.execute_update(statement)
    return session


def seed_sample_data(session: Session) -> Dict[str, List[Dict[str, Any]]]:
    def seed(transaction: Transaction) -> Dict[str, List[Dict[str, Any]]]:
        tech = Department(name="Tech", location="Guangzhou")
        finance = Department(name="Finance", location="Beijing")
        for department in (tech, finance):
            session.add(department)

        vince = Employee(
            name="Vince",
            job="engineer",
            hire_date=datetime(2018, 1, 1),
            salary=100.0,
            department=tech,
            address=Address(city="Guangzhou", street="Tianhe Rd"),
        )
        session.add(vince)

        marry = Employee(
            name="Marry",
            job="trainee",
            hire_date=datetime(2019, 1, 1),
            salary=50.0,
            department=tech,
            manager=vince,
        )
        tom = Employee(
            name="Tom",
            job="director",
            hire_date=datetime(2018, 1, 1),
            salary=200.0,
            department=finance,
        )
        for employee in (marry, tom):
            session.add(employee)

        return {
            "departments": [d.to_dict() for d in (tech, finance)],
            "employees": [e.to_dict() for e in (vince, marry, tom)],
        }

    return session.run_in_transaction(seed)


def give_raise(session: Session, department_name: str, percent: float) -> int:
    """Raise every salary in the named department; returns the rows updated."""

    def apply(transaction: Transaction) -> int:
        updated = 0
        for employee in session.find_list(Employees, department_id__name=department_name):
            employee.salary = round(employee.salary * (1 + percent / 100), 2)
            updated += employee.flush_changes()
        return updated

    return session.run_in_transaction(apply)


def employee_report(session: Session) -> List[Dict[str, Any]]:
    report: List[Dict[str, Any]] = []
    for employee in session.query(Employees).order_by("id"):
        report.append(
            {
                "name": employee.name,
                "department": employee.department.name if employee.department else None,
                "manager_id": employee.manager.id if employee.manager else None,
                "city": employee.address.city if employee.address else None,
                "salary": employee.salary,
            }
        )
    return report


def run_demo(dsn: Optional[str] = None) -> List[Dict[str, Any]]:
    session = bootstrap_session(dsn)
    seed_sample_data(session)
    give_raise(session, "Tech", 10)
    return employee_report(session)


if __name__ == "__main__":
    for row in run_demo("sqlite:///hr_demo.db"):
        print(f"{row['name']:<8} {row['department']:<8} salary={row['salary']}")
