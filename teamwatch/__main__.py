"""Allow ``python -m teamwatch``."""

from __future__ import annotations

from teamwatch.cli import main

raise SystemExit(main())
