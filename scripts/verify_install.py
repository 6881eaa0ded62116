#!/usr/bin/env python
"""
Linework - Installation Verification Script

Checks the third-party stack, a DXF write/read cycle through ezdxf and
the shipped settings file. Exit status is 0 when everything passes.
"""

import io
import sys
from importlib import import_module
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# distribution name -> import name
REQUIRED_PACKAGES = {
    "shapely": "shapely",
    "numpy": "numpy",
    "pyyaml": "yaml",
    "ezdxf": "ezdxf",
}


def package_version(import_name: str) -> str:
    module = import_module(import_name)
    return str(getattr(module, "__version__", "unknown"))


def dxf_cycle() -> str:
    """Write a one-line drawing to memory and read it back."""
    import ezdxf
    from linework.io.dxf_reader import entities_to_segments

    doc = ezdxf.new()
    doc.modelspace().add_line((0, 0), (1, 0), dxfattribs={"layer": "MURS"})
    stream = io.StringIO()
    doc.write(stream)

    restored = ezdxf.read(io.StringIO(stream.getvalue()))
    segments = entities_to_segments(restored.modelspace(), layers=["MURS"])
    if len(segments) != 1:
        raise RuntimeError(f"expected 1 segment, read {len(segments)}")
    return f"segment length {segments[0].length:.2f}"


def settings_layers() -> str:
    from linework.config import load_config

    config = load_config(PROJECT_ROOT / "config" / "settings.yaml")
    return f"precision {config.min_precision}, layers {', '.join(config.layers)}"


def run_check(label: str, check, *check_args) -> bool:
    try:
        info = check(*check_args)
    except Exception as e:
        print(f"  {label:20} [FAIL] {e}")
        return False
    print(f"  {label:20} [PASS] {info}")
    return True


def main() -> int:
    print("Linework installation check")
    print("-" * 40)

    checks = [(name, package_version, import_name) for name, import_name in REQUIRED_PACKAGES.items()]
    checks.append(("dxf read/write", dxf_cycle))
    checks.append(("settings.yaml", settings_layers))

    failed = [check[0] for check in checks if not run_check(*check)]

    print("-" * 40)
    if failed:
        print(f"Failed: {', '.join(failed)}")
        return 1
    print(f"All {len(checks)} checks passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
