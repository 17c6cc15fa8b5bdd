"""MND Playbook: ALSFRS-R scoring and roadmap stage suggestions."""
