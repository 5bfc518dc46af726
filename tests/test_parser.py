#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import unittest

from benchjunit.lib.parser import parse_duration


class TestParseDuration(unittest.TestCase):
    def test_units(self):
        """Every go duration unit is understood"""
        cases = {
            "1.490s": 1.49,
            "17.829s": 17.829,
            "250ms": 0.25,
            "1500us": 0.0015,
            "1500µs": 0.0015,
            "1500μs": 0.0015,
            "42ns": 42e-9,
            "2m": 120.0,
            "1.5h": 5400.0,
        }
        for duration, seconds in cases.items():
            self.assertAlmostEqual(seconds, parse_duration(duration), msg=duration)

    def test_compound(self):
        self.assertAlmostEqual(3723.5, parse_duration("1h2m3.5s"))
        self.assertAlmostEqual(90.25, parse_duration("1m30s250ms"))

    def test_sign(self):
        self.assertAlmostEqual(-1.5, parse_duration("-1.5s"))
        self.assertAlmostEqual(1.5, parse_duration("+1.5s"))

    def test_zero(self):
        self.assertEqual(0.0, parse_duration("0"))
        self.assertEqual(0.0, parse_duration("0s"))

    def test_fraction_only(self):
        self.assertAlmostEqual(0.5, parse_duration(".5s"))

    def test_invalid(self):
        """Anything that isn't a go duration raises ValueError"""
        for duration in ["", "1", "1.5", "s", "1.5sec", "1 s", "1d", "abc", "--1s"]:
            with self.assertRaises(ValueError, msg=duration):
                parse_duration(duration)


if __name__ == "__main__":
    unittest.main()
