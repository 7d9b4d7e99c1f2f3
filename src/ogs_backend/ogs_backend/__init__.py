"""OGS backend package.

Organized by feature modules (students, groups, active, access, presence,
visibility) with a thin Flask controller layer over service/repository layers.
"""
