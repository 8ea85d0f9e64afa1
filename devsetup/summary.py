"""
Summary and exit-code decision.

Only the critical bucket decides the exit status; optional failures add a
warning banner and nothing else.
"""

from .environment import ValidationTally
from .render import print_error, print_header, print_info, print_plain, print_success, print_warning


EXIT_OK = 0
EXIT_FAILURE = 1

NEXT_STEPS = (
    "  1. Create a new project: uv init",
    "  2. Create virtual environment: uv sync",
    "  3. Open in VS Code: code .",
    "  4. Select Python interpreter: Cmd+Shift+P → 'Python: Select Interpreter'",
)


def exit_code(tally: ValidationTally) -> int:
    """Exit status for a finished run: 0 iff every critical check passed."""
    return EXIT_OK if tally.all_critical_passed else EXIT_FAILURE


def print_summary(tally: ValidationTally) -> int:
    """
    Print the tally, the verdict and the next-steps hint.

    Args:
        tally: Counters from the validation phase

    Returns:
        Process exit code
    """
    print_header("📊 Summary")

    print_plain(f"Critical tools: {tally.critical_passed}/{tally.critical_total} ✅")
    print_plain(f"Optional tools: {tally.optional_passed}/{tally.optional_total} ✅")
    print_plain()

    code = exit_code(tally)
    if code == EXIT_OK:
        print_success("All critical tools are installed! You're ready to start.")
        if not tally.all_optional_passed:
            print_warning("Some optional tools need attention. Review messages above.")
        print_plain()
        print_info("Next steps:")
        for line in NEXT_STEPS:
            print_plain(line)
        print_plain()
    else:
        print_error("Some critical tools are missing. Please review the output above.")
        print_plain()
    return code
