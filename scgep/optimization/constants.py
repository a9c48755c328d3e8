"""Default engine constants."""

# Rescale-and-recheck passes before the solver gives up
MAX_ITERATIONS = 50

# Greedy proposal: share of the remaining gap offered to one product
GAP_FRACTION = 0.3

# Largest single deployment regardless of product (MW)
UNIT_CAP_MW = 500.0

# Relative tolerance on material, land and component limits
FEASIBILITY_TOLERANCE = 1e-6

# Gap estimates reported with the convergence label
GAP_CONVERGED = 0.01
GAP_AT_ITERATION_CAP = 0.1

# Material utilization (%) above which a year counts as constrained
CONSTRAINED_UTILIZATION = 85.0

# Peak utilization (%) severity thresholds
SEVERITY_CRITICAL = 95.0
SEVERITY_HIGH = 85.0
SEVERITY_MEDIUM = 70.0

# Land utilization (%) above which a zone is reported as spatially constrained
SPATIAL_CONSTRAINED_UTILIZATION = 85.0

HOURS_PER_YEAR = 8760

STORAGE_ROUND_TRIP_EFFICIENCY = 0.85
