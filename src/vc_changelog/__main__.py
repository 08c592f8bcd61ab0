"""
Allow ``python -m vc_changelog`` as an alternative to the
``vc-changelog`` console script.
"""

from vc_changelog.cli import main


if __name__ == "__main__":
    main(prog_name="vc-changelog")
