#!/usr/bin/env python3
"""
Template Accessibility Linter - Convenience CLI Script

Check HTML/template files for accessibility defects without installing
the package.

Usage:
    python lint.py TEMPLATE [TEMPLATE ...] [options]

Options:
    -f, --format FMT        text or json (default: text)
    -o, --output FILE       Write the report to FILE
    --rules IDS             Comma-separated group/rule ids to enable
    --severity RULE=LEVEL   Override a rule's severity
    --fragment / --page     Force fragment or full-page handling
    --strict                Warnings also fail a file
    --list-rules            List every group and rule id
    -v, --verbose           Verbose output
    --version               Show version

Examples:
    python lint.py Resources/Private/Templates/Page/Default.html
    python lint.py Partials/Menu.html --rules link-text,list-structure
    python lint.py Page.html -f json -o report.json
"""

import sys
from pathlib import Path

# Add package to path if running directly
package_dir = Path(__file__).parent
if str(package_dir) not in sys.path:
    sys.path.insert(0, str(package_dir))

from template_a11y.cli import main

if __name__ == '__main__':
    sys.exit(main())
