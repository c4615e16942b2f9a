"""Managers - loader installers, lockfile, mods and server orchestration"""
