"""
Entry point for running the timetabler as a module.

Usage:
    python -m timetabler generate school.json --store schedules.json
    python -m timetabler show school.json s1 --store schedules.json
    python -m timetabler validate school.json
    python -m timetabler sample school.json --size small
"""

from timetabler.cli import main

if __name__ == "__main__":
    main()
