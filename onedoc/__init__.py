"""Generate README.md and other Markdown files from Rust doc comments."""
