import ast
import pathlib

PACKAGE = pathlib.Path(__file__).resolve().parents[2] / "src" / "schoolledger"


def test_no_infrastructure_imports_in_api():
    for api_py in PACKAGE.glob("**/api/**/*.py"):
        tree = ast.parse(api_py.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom):
                if node.module and ".infrastructure" in node.module:
                    raise AssertionError(f"Infrastructure import in API file: {api_py} -> from {node.module} import ...")
            if isinstance(node, ast.Import):
                for n in node.names:
                    if "infrastructure" in n.name:
                        raise AssertionError(f"Infrastructure import in API file: {api_py} -> import {n.name}")


def test_domain_layers_stay_framework_free():
    for domain_py in PACKAGE.glob("**/domain/*.py"):
        tree = ast.parse(domain_py.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom) and node.module:
                root = node.module.split(".")[0]
                assert root not in {"fastapi", "sqlalchemy", "starlette"}, f"{domain_py} imports {node.module}"
