"""Safety checklist client: response store, progress, history and submission pipeline."""
