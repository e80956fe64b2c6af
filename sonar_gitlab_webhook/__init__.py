"""SonarQube quality gate to GitLab comment webhook bridge."""

__version__ = "0.1.0"
