"""Validates generated wrapper modules for syntax and structural correctness."""

import ast


def validate_python(files: dict[str, str]) -> dict[str, str]:
    """Check Python files for syntax errors.

    Returns dict of {filename: error_message} for files with errors.
    """
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".py"):
            continue
        if not content.strip():
            continue
        try:
            ast.parse(content, filename=filename)
        except SyntaxError as e:
            errors[filename] = f"SyntaxError: {e.msg} (line {e.lineno})"
    return errors


def validate_names(files: dict[str, str]) -> dict[str, str]:
    """Check that no module defines the same top-level function twice.

    Only files that parse are inspected.
    """
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".py") or not content.strip():
            continue
        try:
            tree = ast.parse(content, filename=filename)
        except SyntaxError:
            continue
        seen = set()
        duplicates = []
        for node in tree.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if node.name in seen:
                    duplicates.append(node.name)
                seen.add(node.name)
        if duplicates:
            errors[filename] = f"Duplicate functions: {', '.join(duplicates)}"
    return errors


def validate_files(files: dict[str, str]) -> dict[str, str]:
    """Run all validations on generated files.

    Returns dict of {filename: error_message} for all files with errors.
    """
    errors = {}
    errors.update(validate_names(files))
    errors.update(validate_python(files))
    return errors
