import runpy
import sys

import pytest


def test_main_entrypoint(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["azure-pim-tool"])

    with pytest.raises(SystemExit) as exc:
        runpy.run_module("azure_pim_tool", run_name="__main__")

    assert exc.value.code == 0
