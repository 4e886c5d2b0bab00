"""User domain - attendee accounts"""
