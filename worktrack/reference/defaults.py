# WorkTrack - Default Reference Dataset
# Assembled from the per-model defaults

from worktrack.models.business_unit import DEFAULT_BUSINESS_UNITS
from worktrack.models.cost_code import DEFAULT_COST_CODES
from worktrack.models.employee import DEFAULT_EMPLOYEES
from worktrack.models.project import DEFAULT_PROJECTS
from worktrack.models.work_type import DEFAULT_WORK_TYPES


DEFAULT_REFERENCE_DATA = {
    "businessUnits": DEFAULT_BUSINESS_UNITS,
    "employees": DEFAULT_EMPLOYEES,
    "projects": DEFAULT_PROJECTS,
    "costCodes": DEFAULT_COST_CODES,
    "workTypes": DEFAULT_WORK_TYPES,
}
