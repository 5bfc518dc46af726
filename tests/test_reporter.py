#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

import io
import json
import unittest
import xml.etree.ElementTree as ET

from benchjunit.lib.junit import Failure, Property, TestCase, TestSuite, TestSuites
from benchjunit.lib.reporter import JSONReporter, JUnitReporter, StdoutReporter


def sample_suites():
    return TestSuites(
        suites=[
            TestSuite(
                name="example.com/foo",
                tests=2,
                failures=1,
                time="1.500000",
                cases=[
                    TestCase(
                        class_name="foo",
                        name="BenchmarkA-4",
                        time="0.001000",
                        properties=[
                            Property(name="op count", value="1000"),
                            Property(name="avg op duration (ns/op)", value="1000"),
                        ],
                    ),
                    TestCase(class_name="foo", name="BenchmarkSkip", skipped=True),
                    TestCase(
                        class_name="foo",
                        name="BenchmarkFail",
                        failure=Failure(text="x < y\n"),
                        properties=[Property(name="categorized_fail", value="x < y\n")],
                    ),
                ],
            )
        ]
    )


class TestJUnitReporter(unittest.TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.reporter = JUnitReporter(self.stream)

    def test_report(self):
        """Report is valid XML in the TestGrid layout"""
        self.reporter.report(sample_suites())
        root = ET.fromstring(self.stream.getvalue())

        self.assertEqual("testsuites", root.tag)
        suites = root.findall("testsuite")
        self.assertEqual(1, len(suites))
        self.assertEqual(
            {"name": "example.com/foo", "tests": "2", "failures": "1", "time": "1.500000"},
            suites[0].attrib,
        )

        passed, skipped, failed = suites[0].findall("testcase")
        self.assertEqual(
            {"class_name": "foo", "name": "BenchmarkA-4", "time": "0.001000"},
            passed.attrib,
        )
        self.assertIsNone(passed.find("failure"))
        self.assertIsNone(passed.find("skipped"))
        self.assertEqual(
            [
                {"name": "op count", "value": "1000"},
                {"name": "avg op duration (ns/op)", "value": "1000"},
            ],
            [p.attrib for p in passed.find("properties")],
        )

        self.assertEqual("0", skipped.get("time"))
        self.assertIsNotNone(skipped.find("skipped"))
        # properties are written even when there are none
        self.assertIsNotNone(skipped.find("properties"))
        self.assertEqual(0, len(skipped.find("properties")))

        self.assertEqual("x < y\n", failed.find("failure").text)
        self.assertEqual(
            "x < y\n", failed.find("properties/property").get("value")
        )

    def test_invalid_xml_chars(self):
        """Control characters from colored logs still give well-formed XML"""
        text = "\x1b[31mboom\x1b[0m\x00\n"
        suites = TestSuites(
            suites=[
                TestSuite(
                    name="example.com/foo",
                    cases=[
                        TestCase(
                            class_name="foo",
                            name="BenchmarkFail",
                            failure=Failure(text=text),
                            properties=[Property(name="categorized_fail", value=text)],
                        )
                    ],
                )
            ]
        )
        self.reporter.report(suites)
        root = ET.fromstring(self.stream.getvalue())

        expected = "\ufffd[31mboom\ufffd[0m\ufffd\n"
        case = root.find("testsuite/testcase")
        self.assertEqual(expected, case.find("failure").text)
        self.assertEqual(expected, case.find("properties/property").get("value"))

    def test_empty(self):
        self.reporter.report(TestSuites())
        self.assertEqual("<testsuites />\n", self.stream.getvalue())


class TestJSONReporter(unittest.TestCase):
    def test_report(self):
        stream = io.StringIO()
        JSONReporter(stream).report(sample_suites())
        report = json.loads(stream.getvalue())

        suite = report["suites"][0]
        self.assertEqual("example.com/foo", suite["name"])
        self.assertEqual(2, suite["tests"])
        self.assertEqual(
            ["BenchmarkA-4", "BenchmarkSkip", "BenchmarkFail"],
            [c["name"] for c in suite["cases"]],
        )
        self.assertIsNone(suite["cases"][0]["failure"])
        self.assertTrue(suite["cases"][1]["skipped"])
        self.assertEqual({"text": "x < y\n"}, suite["cases"][2]["failure"])


class TestStdoutReporter(unittest.TestCase):
    def test_report(self):
        stream = io.StringIO()
        StdoutReporter(stream).report(sample_suites())
        expected = (
            "example.com/foo: 2 benchmark(s), 1 failure(s) in 1.500000s\n"
            "  BenchmarkA-4: \u001b[32mPASSED\033[0m\n"
            "    op count=1000\n"
            "    avg op duration (ns/op)=1000\n"
            "  BenchmarkSkip: \u001b[33mSKIPPED\033[0m\n"
            "  BenchmarkFail: \u001b[31mFAILED\033[0m\n"
            "    x < y\n"
        )
        self.assertEqual(expected, stream.getvalue())


class TestClose(unittest.TestCase):
    def test_close_leaves_stream_open(self):
        """The caller owns the stream, close only flushes it"""
        stream = io.StringIO()
        reporter = JSONReporter(stream)
        reporter.report(TestSuites())
        reporter.close()
        self.assertFalse(stream.closed)
        self.assertEqual({"suites": []}, json.loads(stream.getvalue()))


if __name__ == "__main__":
    unittest.main()
