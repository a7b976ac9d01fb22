#!/usr/bin/env python3
"""
Intune Role Manager entry script.

Creates a custom Intune role definition from a permission file. Equivalent
to the installed `intune-role-manager` command.

Layers:
- CLI Interface Layer: argument parsing and command dispatch (main_app)
- Application Layer: pipeline orchestration (provisioner)
- Input Layer: loading, schema validation and action mapping (input)
- Data Access Layer: Microsoft Graph authentication and role client (core.auth, graph)
"""

import sys
from intune_role_manager.libs.main_app import main


if __name__ == "__main__":
    sys.exit(main())
