"""
Core domain services.

Import from the submodules directly; entities depend on
``line_item_calculator``, so this package does not import eagerly.
"""
