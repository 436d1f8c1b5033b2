"""
Permission feature module.

Action/subject based access control: a per-request Ability compiled from
the principal's roles, and FastAPI guards that evaluate route policies
against it before any handler runs.
"""
