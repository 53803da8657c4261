# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Exception hierarchy for winosver.

The parser and the reconciler never raise on data: an unparseable version
string is a typed ParseOutcome and a missed requirement is a typed
ReconcileStatus. Exceptions are reserved for problems the caller has to fix
or explicitly asks for:

- ConfigError: Source table or requirements YAML is malformed, or a provider
    name is unknown
- ShortfallError: Raised only by ReconcileResult.raise_for_status() when a
    caller wants a missed requirement to be fatal

All exceptions inherit from WinOSVerError, allowing users to catch all
winosver errors with a single except clause if needed.

Example:
    Making a shortfall fatal:
        ```python
        from winosver.core import detect_os_version
        from winosver.exceptions import ConfigError, ShortfallError

        try:
            result = detect_os_version().raise_for_status()
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except ShortfallError as e:
            print(f"Version not trustworthy enough: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "WinOSVerError",
    "ConfigError",
    "ShortfallError",
]


class WinOSVerError(Exception):
    """Base exception for all winosver errors.

    All winosver-specific exceptions inherit from this class, allowing users
    to catch all winosver errors with a single except clause if needed.
    """

    pass


class ConfigError(WinOSVerError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, empty files, non-mapping documents)
    - Source profiles (missing priority, unknown kind, tiers outside 0..7,
        malformed conditional rules)
    - Default requirements that fail the RequiredTiers consistency rules
    - Provider lookups for names that were never registered

    Example:
        Catching configuration errors:
            ```python
            from winosver.config import load_detector_config
            from winosver.exceptions import ConfigError

            try:
                config = load_detector_config(Path("override.yaml"))
            except ConfigError as e:
                print(f"Config error: {e}")
            ```
    """

    pass


class ShortfallError(WinOSVerError):
    """Raised when a reconciliation did not meet the caller's requirements.

    Only ReconcileResult.raise_for_status() raises this; reconcile() itself
    always returns the best-effort composite alongside its status.

    Attributes:
        status: The ReconcileStatus describing the failure.
    """

    def __init__(self, message: str, status: object = None) -> None:
        super().__init__(message)
        self.status = status
