"""
Services package for epggrab

This package contains the XMLTV reconciliation and grabber module logic.
"""
from epggrab.services.channel_registry import ChannelRegistry
from epggrab.services.grab_types import GrabberDescriptor, GrabberModule, GrabStats, ModuleCapability
from epggrab.services.grabber_discovery_service import discover_grabbers, parse_grabber_list
from epggrab.services.guide_store import GuideStore
from epggrab.services.module_service import GrabberError, ModuleRegistry, ingest, run_grab, run_grab_cycle, xmltv_init
from epggrab.services.tag_tree import load_document
from epggrab.services.xmltv_parser_service import XmltvReconciler

__all__ = [
    'ChannelRegistry',
    'GrabberDescriptor',
    'GrabberModule',
    'GrabStats',
    'ModuleCapability',
    'discover_grabbers',
    'parse_grabber_list',
    'GuideStore',
    'ModuleRegistry',
    'ingest',
    'run_grab',
    'run_grab_cycle',
    'GrabberError',
    'xmltv_init',
    'load_document',
    'XmltvReconciler',
]
