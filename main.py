import sys
import argparse
import re
from typing import TextIO, Optional, List
from tabulate import tabulate
from serializability import (
    Operation,
    ScheduleError,
    InvalidOperation,
    SerializabilityResult,
    check_conflict_serializability,
)


EXAMPLE_SCHEDULES = [
    (
        "Serializable schedule",
        [
            ("T1", "R", "x"),
            ("T2", "R", "x"),
            ("T1", "W", "x"),
            ("T2", "C", ""),
            ("T1", "C", ""),
        ],
    ),
    (
        "Non-serializable schedule",
        [
            ("T1", "R", "x"),
            ("T2", "W", "x"),
            ("T2", "R", "y"),
            ("T1", "W", "y"),
            ("T1", "C", ""),
            ("T2", "C", ""),
        ],
    ),
    (
        "Schedule with abort",
        [
            ("T1", "R", "x"),
            ("T2", "W", "x"),
            ("T1", "A", ""),
            ("T2", "C", ""),
        ],
    ),
]


class ScheduleChecker:
    """
    Command-line front end for the conflict-serializability checker.

    Reads schedules written one operation per line, runs each through
    check_conflict_serializability and prints the verdict, the precedence
    graph and any warnings about transaction endings.
    """

    def parse_operation(self, line: str) -> Optional[Operation]:
        """
        Parse a single line into an Operation.

        Supported forms:
            - R(T1,x): T1 reads x
            - W(T1,x): T1 writes x
            - C(T1): T1 commits
            - A(T1): T1 aborts

        Args:
            line: A string containing a single operation

        Returns:
            The parsed Operation, or None if the line is empty or a comment

        Raises:
            InvalidOperation: If the line is not a recognised operation
            MissingDataItem: If a read or write names no data item
        """
        line = line.split("//")[0].strip()
        if not line:
            return None

        # Match data access: R(T1,x) / W(T1,x)
        if match := re.fullmatch(r"([RW])\(\s*(\w+)\s*(?:,\s*(\w*)\s*)?\)", line, re.I):
            return Operation(match.group(2), match.group(1).upper(), match.group(3) or "")

        # Match termination: C(T1) / A(T1)
        if match := re.fullmatch(r"([CA])\(\s*(\w+)\s*\)", line, re.I):
            return Operation(match.group(2), match.group(1).upper())

        raise InvalidOperation(f"Cannot parse operation '{line}'")

    def process_input(self, input_source: TextIO) -> None:
        """
        Process schedules from an input source, one test case at a time.

        Lines are grouped into schedules separated by "// Test" markers.
        Input without markers is treated as a single schedule.

        Args:
            input_source: A file-like object (file or stdin) containing operations

        Side effects:
            - Prints test markers and results to stdout
        """
        current_test = 0
        test_lines: List[str] = []

        for line in input_source:
            line = line.strip()

            # Start of new test
            if line.startswith("// Test"):
                if test_lines:
                    self._execute_test(current_test, test_lines)
                current_test += 1
                test_lines = []
                print(f"\n=== Test {current_test} ===")
                continue

            if not test_lines and not line:
                continue

            test_lines.append(line)

        if test_lines:
            self._execute_test(current_test, test_lines)

    def _execute_test(self, test_num: int, test_lines: List[str]) -> None:
        """
        Check a single schedule and print its report.

        A malformed line stops the current test only; the error is printed
        and the next test still runs.

        Args:
            test_num: The test number (for reference, not used in execution)
            test_lines: Lines making up the schedule
        """
        try:
            schedule = [
                op for op in (self.parse_operation(line) for line in test_lines) if op
            ]
            result = check_conflict_serializability(schedule)
        except ScheduleError as e:
            print(f"Error checking schedule: {str(e)}")
            return
        self.report(schedule, result)

    def report(self, schedule: List[Operation], result: SerializabilityResult) -> None:
        """
        Print a schedule together with its serializability result.

        Side effects:
            - Prints the schedule, verdict, precedence graph table and warnings
        """
        print(f"Schedule: {', '.join(str(op) for op in schedule)}")
        if result.is_serializable:
            print(f"Result: serializable (serial order: {' -> '.join(result.serial_order)})")
        else:
            print("Result: not serializable (precedence graph has a cycle)")

        table_data = [
            [node, ", ".join(successors) or "-"]
            for node, successors in result.graph.items()
        ]
        print(tabulate(table_data, headers=["Transaction", "Precedes"], tablefmt="grid"))

        for warning in result.warnings:
            print(warning)


def run_examples(checker: ScheduleChecker) -> None:
    """Check and print the built-in example schedules."""
    for num, (title, schedule) in enumerate(EXAMPLE_SCHEDULES, start=1):
        print(f"\n=== Example {num}: {title} ===")
        operations = [Operation.from_tuple(element) for element in schedule]
        checker.report(operations, check_conflict_serializability(operations))


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments for the schedule checker.

    Returns:
        argparse.Namespace: Parsed arguments containing:
            - input_file: File object for reading schedules, or None for stdin
            - examples: Whether to run the built-in example schedules
    """
    parser = argparse.ArgumentParser(
        description="Conflict-serializability checker for transaction schedules"
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        type=argparse.FileType("r"),
        default=None,
        help="Input file containing schedules (default: stdin)",
    )
    parser.add_argument(
        "--examples",
        action="store_true",
        help="Check the built-in example schedules instead of reading input",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the schedule checker.

    Side effects:
        - Reads from file or stdin unless --examples is given
        - Prints results to stdout
        - Closes input file if one was opened
    """
    args = parse_args(argv)
    checker = ScheduleChecker()

    if args.examples:
        run_examples(checker)
    else:
        checker.process_input(args.input_file if args.input_file else sys.stdin)

    if args.input_file:
        args.input_file.close()


if __name__ == "__main__":
    main()
