"""Utility helpers for netkit."""
