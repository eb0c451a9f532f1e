# tests/test_router_imports.py
# Ensure all API modules import cleanly and expose their routers.

import importlib
import pytest

MODULES = [
    "agencydesk.api.agents",
    "agencydesk.api.policies",
    "agencydesk.api.commissions",
    "agencydesk.api.health",
]


@pytest.mark.parametrize("modname", MODULES)
def test_import_module_has_router(modname):
    mod = importlib.import_module(modname)
    assert hasattr(mod, "router"), f"{modname} should export 'router'"


def test_record_routers_cover_plain_entities():
    records = importlib.import_module("agencydesk.api.records")
    prefixes = {r.prefix for r in records.routers}
    assert prefixes == {"/clients", "/leads", "/updates", "/users"}
