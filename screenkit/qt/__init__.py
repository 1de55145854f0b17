"""PyQt6 host adapters. Importing submodules requires PyQt6."""
