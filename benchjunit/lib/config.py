#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from benchjunit.plugins.parsers.gobench import DEFAULT_FAILURE_TEXT_LIMIT


logger = logging.getLogger(__name__)


@dataclass
class Config(object):
    """Settings for a benchjunit run.

    Loaded from an optional YAML file, command line flags take precedence
    over anything in the file.
    """

    go: str = "go"

    packages: List[str] = field(default_factory=list)

    test_args: List[str] = field(default_factory=list)
    """additional args for go test"""

    output: str = "-"
    """report destination, '-' is stdout"""

    log_file: Optional[str] = None
    """optional file for the complete go test output"""

    format: str = "junit"

    parser: str = "gobench"

    timeout: Optional[float] = None

    failure_text_limit: int = DEFAULT_FAILURE_TEXT_LIMIT

    @staticmethod
    def arg_list(args):
        """Convert argument definitions to a list suitable for subprocess."""
        if isinstance(args, list):
            return [str(a) for a in args]

        lst = []
        for key, val in args.items():
            lst.append("--" + key)
            if val is not None:
                lst.append(str(val))
        return lst

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "Config":
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError(f"config must be a mapping, not {type(raw).__name__}")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError("unknown config key(s): {}".format(", ".join(unknown)))
        raw = dict(raw)
        if "test_args" in raw:
            raw["test_args"] = cls.arg_list(raw["test_args"] or [])
        if "packages" in raw:
            packages = raw["packages"] or []
            # a single package can be given as a plain string
            if isinstance(packages, str):
                packages = [packages]
            if not isinstance(packages, list):
                raise ValueError(
                    "packages must be a list, not {}".format(type(packages).__name__)
                )
            raw["packages"] = [str(p) for p in packages]
        return cls(**raw)

    @classmethod
    def load(cls, stream) -> "Config":
        logger.info('Loading config from "{}"'.format(getattr(stream, "name", stream)))
        return cls.from_dict(yaml.safe_load(stream))

    def merge(self, **overrides) -> "Config":
        """Copy of this config with every override that is not None/empty."""
        changes = {}
        for key, value in overrides.items():
            if value is None or value == ():
                continue
            # click hands multiple=True options over as tuples
            changes[key] = list(value) if isinstance(value, tuple) else value
        return dataclasses.replace(self, **changes)
