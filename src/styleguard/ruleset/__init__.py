"""Rule configuration: YAML loading, built-in profiles and resolution."""
