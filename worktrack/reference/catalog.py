# WorkTrack - Reference Data Catalog
# Immutable-at-runtime lookups for existence checks and seeding

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Iterator, Mapping, Optional

from worktrack.utils import to_snake_case


Row = dict[str, Any]


def _normalize(row: Mapping[str, Any], **extra: Any) -> Row:
    """snake_case keys; ISO strings in *_date columns become dates."""
    normalized: Row = {}
    for key, value in row.items():
        name = to_snake_case(key)
        if name.endswith("_date") and isinstance(value, str) and value:
            value = date.fromisoformat(value)
        normalized[name] = value
    normalized.update(extra)
    return normalized


class ReferenceData:
    """
    Catalogs of business units, employees, projects, jobs, work orders,
    cost codes and work types.

    Built once from a static dataset (or from the stored reference tables)
    and passed to whoever needs it: the validation engine for existence
    checks and the schema manager for seeding. Nothing here touches the
    database.

    Usage:
        reference = ReferenceData.default()

        reference.is_valid_employee("EMP001")        # True
        reference.get_project("22009017")["end_date"]  # date(2024, 12, 31)

        for table, row in reference.seed_rows():
            ...
    """

    def __init__(
        self,
        business_units: Iterable[Mapping[str, Any]] = (),
        employees: Iterable[Mapping[str, Any]] = (),
        projects: Iterable[Mapping[str, Any]] = (),
        cost_codes: Iterable[Mapping[str, Any]] = (),
        work_types: Iterable[Mapping[str, Any]] = (),
        jobs: Iterable[Mapping[str, Any]] = (),
        work_orders: Iterable[Mapping[str, Any]] = (),
    ):
        self.business_units: dict[str, Row] = {}
        self.employees: dict[str, Row] = {}
        self.projects: dict[str, Row] = {}
        self.jobs: dict[str, Row] = {}
        self.work_orders: dict[str, Row] = {}
        self.cost_codes: dict[str, Row] = {}
        self.work_types: dict[str, Row] = {}

        for bu in business_units:
            row = _normalize(bu)
            self.business_units[row["code"]] = row

        for emp in employees:
            row = _normalize(emp)
            self.employees[row["id"]] = row

        for cc in cost_codes:
            row = _normalize(cc)
            self.cost_codes[row["code"]] = row

        for wt in work_types:
            row = _normalize(wt)
            self.work_types[row["id"]] = row

        # Projects may carry their jobs and work orders nested
        for project in projects:
            nested_jobs = project.get("jobs") or []
            row = _normalize({k: v for k, v in project.items() if k != "jobs"})
            self.projects[row["id"]] = row

            for job in nested_jobs:
                self._add_job(job, project_id=row["id"])

        for job in jobs:
            self._add_job(job)

        for wo in work_orders:
            wo_row = _normalize(wo)
            self.work_orders[wo_row["id"]] = wo_row

    def _add_job(self, job: Mapping[str, Any], **extra: Any) -> None:
        nested = job.get("workOrders") or job.get("work_orders") or []
        row = _normalize(
            {k: v for k, v in job.items() if k not in ("workOrders", "work_orders")},
            **extra,
        )
        self.jobs[row["id"]] = row

        for wo in nested:
            wo_row = _normalize(wo, job_id=row["id"])
            self.work_orders[wo_row["id"]] = wo_row

    @classmethod
    def from_dataset(cls, dataset: Mapping[str, Iterable[Mapping[str, Any]]]) -> "ReferenceData":
        """
        Build from a dataset keyed by catalog name.

        Keys may be camelCase ("businessUnits") or snake_case ("business_units").
        """
        catalogs = {to_snake_case(key): rows for key, rows in dataset.items()}
        return cls(
            business_units=catalogs.get("business_units", ()),
            employees=catalogs.get("employees", ()),
            projects=catalogs.get("projects", ()),
            cost_codes=catalogs.get("cost_codes", ()),
            work_types=catalogs.get("work_types", ()),
            jobs=catalogs.get("jobs", ()),
            work_orders=catalogs.get("work_orders", ()),
        )

    @classmethod
    def default(cls) -> "ReferenceData":
        """The default catalogs shipped with the models."""
        from worktrack.reference.defaults import DEFAULT_REFERENCE_DATA
        return cls.from_dataset(DEFAULT_REFERENCE_DATA)

    # Existence checks

    def is_valid_business_unit(self, code: str) -> bool:
        bu = self.business_units.get(code)
        return bool(bu) and bool(bu.get("active", True))

    def is_valid_employee(self, employee_id: str) -> bool:
        emp = self.employees.get(employee_id)
        return bool(emp) and bool(emp.get("active", True))

    def is_valid_project(self, project_id: str) -> bool:
        """Projects only accept time while Active."""
        project = self.projects.get(project_id)
        return bool(project) and project.get("status", "Active") == "Active"

    def is_valid_cost_code(self, code: str) -> bool:
        cc = self.cost_codes.get(code)
        return bool(cc) and bool(cc.get("active", True))

    def is_valid_work_type(self, work_type_id: str) -> bool:
        return work_type_id in self.work_types

    # Lookups

    def get_business_unit(self, code: str) -> Optional[Row]:
        return self.business_units.get(code)

    def get_employee(self, employee_id: str) -> Optional[Row]:
        return self.employees.get(employee_id)

    def get_project(self, project_id: str) -> Optional[Row]:
        """Project details regardless of status."""
        return self.projects.get(project_id)

    def get_job(self, project_id: str, job_id: str) -> Optional[Row]:
        job = self.jobs.get(job_id)
        if job and job.get("project_id") == project_id:
            return job
        return None

    def get_work_order(self, job_id: str, work_order_id: str) -> Optional[Row]:
        wo = self.work_orders.get(work_order_id)
        if wo and wo.get("job_id") == job_id:
            return wo
        return None

    def get_cost_code(self, code: str) -> Optional[Row]:
        return self.cost_codes.get(code)

    def get_work_type(self, work_type_id: str) -> Optional[Row]:
        return self.work_types.get(work_type_id)

    def projects_for_business_unit(self, code: str) -> list[Row]:
        """Active projects owned by a business unit."""
        return [
            p for p in self.projects.values()
            if p.get("business_unit") == code and p.get("status", "Active") == "Active"
        ]

    def employees_for_business_unit(self, code: str) -> list[Row]:
        """Active employees in a business unit."""
        return [
            e for e in self.employees.values()
            if e.get("business_unit") == code and e.get("active", True)
        ]

    def jobs_for_project(self, project_id: str) -> list[Row]:
        return [j for j in self.jobs.values() if j.get("project_id") == project_id]

    def work_orders_for_job(self, job_id: str) -> list[Row]:
        return [wo for wo in self.work_orders.values() if wo.get("job_id") == job_id]

    def billable_cost_codes(self) -> list[Row]:
        return [cc for cc in self.cost_codes.values() if cc.get("billable")]

    def cost_code_rate(self, code: str) -> Decimal:
        cc = self.cost_codes.get(code)
        return Decimal(str(cc.get("rate", 0))) if cc else Decimal("0")

    def work_type_multiplier(self, work_type_id: str) -> Decimal:
        wt = self.work_types.get(work_type_id)
        return Decimal(str(wt.get("multiplier", 1))) if wt else Decimal("1")

    # Seeding

    def _employees_supervisors_first(self) -> list[Row]:
        """Order employees so every supervisor precedes their reports."""
        ordered: list[Row] = []
        placed: set[str] = set()
        visiting: set[str] = set()

        def place(emp_id: str) -> None:
            if emp_id in placed or emp_id in visiting:
                return
            visiting.add(emp_id)
            supervisor = self.employees[emp_id].get("supervisor")
            if supervisor and supervisor in self.employees:
                place(supervisor)
            visiting.discard(emp_id)
            placed.add(emp_id)
            ordered.append(self.employees[emp_id])

        for emp_id in self.employees:
            place(emp_id)
        return ordered

    def seed_rows(self) -> Iterator[tuple[str, Row]]:
        """
        Yield (table_name, row) pairs in foreign-key order.

        Business units, employees (supervisors first), cost codes and work
        types come before the project tree that references them.
        """
        for row in self.business_units.values():
            yield "business_units", dict(row)
        for row in self._employees_supervisors_first():
            yield "employees", dict(row)
        for row in self.cost_codes.values():
            yield "cost_codes", dict(row)
        for row in self.work_types.values():
            yield "work_types", dict(row)
        for row in self.projects.values():
            yield "projects", dict(row)
        for row in self.jobs.values():
            yield "jobs", dict(row)
        for row in self.work_orders.values():
            yield "work_orders", dict(row)

    def __len__(self) -> int:
        return sum(
            len(catalog) for catalog in (
                self.business_units, self.employees, self.projects, self.jobs,
                self.work_orders, self.cost_codes, self.work_types,
            )
        )
