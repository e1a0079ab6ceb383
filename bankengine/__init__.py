"""bankengine: headless turn engine, advisor and session lifecycle."""
