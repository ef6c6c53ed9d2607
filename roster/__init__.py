"""ANZAC 2nd Commandos roster: personnel, roles, school scoping and migrations."""
