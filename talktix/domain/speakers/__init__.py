"""Speaker domain - presenter accounts"""
