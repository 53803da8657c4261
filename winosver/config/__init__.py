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

"""Configuration loading for winosver.

This module loads the YAML source table with a layered approach:

  - Packaged defaults (winosver/defaults/sources.yaml)
  - An optional overlay file supplied by the caller

The loader performs deep merging where dicts are merged recursively and
lists/scalars are replaced (last wins).

Public API:

- load_detector_config: Load, merge and validate the source table
- parse_detector_config: Validate an already-merged mapping
- DetectorConfig: The validated result

Example:
    Basic usage:

        from winosver.config import load_detector_config

        config = load_detector_config()
        print([p.name for p in config.profiles])
        # ['kernel_file', 'wmi', 'ver_command', 'registry', 'environment']

"""

from .loader import DetectorConfig, load_detector_config, parse_detector_config

__all__ = ["DetectorConfig", "load_detector_config", "parse_detector_config"]
