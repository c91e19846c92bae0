"""
Forkflow

Forks applications (with their pages, actions and datasource bindings)
from one workspace into another on behalf of the requesting user.
"""
