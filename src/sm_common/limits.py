"""Upper bounds for integers accepted over the API.

They mirror the PostgreSQL column types: week counts are INT, every other
quantity, amount and id is BIGINT. A request past either bound is a 422,
never a database error.
"""

PG_INT_MAX = 2**31 - 1
PG_BIGINT_MAX = 2**63 - 1
