from .demo import (  # noqa: F401
    bootstrap_session,
    employee_report,
    give_raise,
    run_demo,
    seed_sample_data,
)

__all__ = [
    "bootstrap_session",
    "seed_sample_data",
    "give_raise",
    "employee_report",
    "run_demo",
]
