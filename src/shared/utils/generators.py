from cuid2 import cuid_wrapper

# Shared generator; ids for tenants, roles, users and join rows all come from here
_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant id for a new row"""
    value = _cuid()
    assert isinstance(value, str)
    return value
