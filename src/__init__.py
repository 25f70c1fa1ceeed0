"""Recipe Costing Engine."""
