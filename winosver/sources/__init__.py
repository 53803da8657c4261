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

"""Version sources for winosver.

A source is one technique for learning the OS version. The techniques
themselves (WMI, kernel file metadata, `cmd /c ver`, the registry, the
process environment) are providers supplied by the host application; this
package only describes how far each technique can be trusted and adapts
providers to the interface the reconciler consumes.

Source Kinds:
    string : StringSource
        Provider returns a raw version string, salvaged with
        parse_flexible().
    components : ComponentSource
        Provider returns VersionComponents directly.

Example:
    Bind providers to the shipped source table:

        from winosver.config import load_detector_config
        from winosver.sources import build_sources

        config = load_detector_config()
        sources = build_sources(
            config.profiles,
            {"wmi": wmi_version, "ver_command": ver_output},
        )

"""

from .adapters import ComponentSource, ProfiledSource, StringSource, build_sources
from .base import (
    MAX_TIER,
    MIN_TIER,
    UNKNOWN_TIER,
    SourceProfile,
    SourceReading,
    TierCondition,
    TierRule,
    VersionSource,
    get_provider,
    register_provider,
    registered_providers,
    unregister_provider,
)

__all__ = [
    "MAX_TIER",
    "MIN_TIER",
    "UNKNOWN_TIER",
    "ComponentSource",
    "ProfiledSource",
    "SourceProfile",
    "SourceReading",
    "StringSource",
    "TierCondition",
    "TierRule",
    "VersionSource",
    "build_sources",
    "get_provider",
    "register_provider",
    "registered_providers",
    "unregister_provider",
]
