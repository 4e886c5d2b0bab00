"""Booking domain - slot reservation engine"""
