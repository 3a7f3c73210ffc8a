import re
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from workflow_center.config import Settings  # noqa: E402


def find_env_vars():
    """Find all environment variables referenced directly in code."""
    env_vars = set()
    for py_file in (ROOT / "workflow_center").rglob("*.py"):
        content = py_file.read_text(encoding="utf-8", errors="ignore")
        env_vars.update(re.findall(r'os\.getenv\(["\']([A-Z0-9_]+)["\']', content))
        env_vars.update(re.findall(r'os\.environ\[\s*["\']([A-Z0-9_]+)["\']\s*\]', content))
        env_vars.update(re.findall(r'alias="([A-Z0-9_]+)"', content))
    return sorted(env_vars)


def declared_settings():
    return sorted(field.alias or name.upper() for name, field in Settings.model_fields.items())


def env_file_vars(path):
    if not path.exists():
        return []
    names = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            names.append(line.split("=", 1)[0].strip())
    return sorted(names)


def verify_against_settings():
    code_vars = set(find_env_vars())
    declared = set(declared_settings())
    env_file = ROOT / ".env"
    env_vars = set(env_file_vars(env_file))

    undeclared = sorted(code_vars - declared)
    unknown_in_env = sorted(env_vars - declared)

    print("=== ENV VAR VERIFICATION ===")
    print(f"Code references: {len(code_vars)} unique vars")
    print(f"Settings declare: {len(declared)} vars")
    print("")
    if undeclared:
        print(f"READ BUT NOT DECLARED IN SETTINGS ({len(undeclared)}):")
        for v in undeclared:
            print(f"  - {v}")
    else:
        print("Every referenced var is declared in Settings.")
    print("")
    if not env_vars:
        print(f"No {env_file.name} file; defaults apply.")
    elif unknown_in_env:
        print(f"UNKNOWN IN {env_file.name} ({len(unknown_in_env)}):")
        for v in unknown_in_env:
            print(f"  - {v}")
    else:
        print(f"No unknown vars in {env_file.name}.")
    return 1 if undeclared else 0


if __name__ == "__main__":
    sys.exit(verify_against_settings())
