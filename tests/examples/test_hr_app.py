from examples.hr_app import bootstrap_session, employee_report, give_raise, run_demo, seed_sample_data
from examples.hr_app.models import Employee, Employees


def test_run_demo_reports_hydrated_graph(tmp_path):
    report = run_demo(f"sqlite:///{tmp_path / 'hr.db'}")

    assert [row["name"] for row in report] == ["Vince", "Marry", "Tom"]
    vince, marry, tom = report
    assert vince == {
        "name": "Vince",
        "department": "Tech",
        "manager_id": None,
        "city": "Guangzhou",
        "salary": 110.0,
    }
    assert marry["manager_id"] == 1
    assert marry["city"] is None
    assert marry["salary"] == 55.0
    assert tom["department"] == "Finance"
    assert tom["salary"] == 200.0


def test_seed_returns_generated_keys(tmp_path):
    session = bootstrap_session(f"sqlite:///{tmp_path / 'seed.db'}")
    seeded = seed_sample_data(session)

    assert [department["id"] for department in seeded["departments"]] == [1, 2]
    assert [employee["id"] for employee in seeded["employees"]] == [1, 2, 3]
    assert seeded["employees"][0]["address"] == {"city": "Guangzhou", "street": "Tianhe Rd"}


def test_raise_only_touches_named_department(tmp_path):
    session = bootstrap_session(f"sqlite:///{tmp_path / 'raise.db'}")
    seed_sample_data(session)

    assert give_raise(session, "Finance", 50) == 1
    assert give_raise(session, "Nowhere", 50) == 0

    salaries = {row["name"]: row["salary"] for row in employee_report(session)}
    assert salaries == {"Vince": 100.0, "Marry": 50.0, "Tom": 300.0}


def test_materialized_employee_references(tmp_path):
    session = bootstrap_session(f"sqlite:///{tmp_path / 'refs.db'}")
    seed_sample_data(session)

    marry = session.find_one(Employees, name="Marry")
    assert isinstance(marry, Employee)
    assert marry.department.location == "Guangzhou"
    assert marry.manager.id == 1
    assert marry.manager.name is None
    assert marry.hire_date.year == 2019
