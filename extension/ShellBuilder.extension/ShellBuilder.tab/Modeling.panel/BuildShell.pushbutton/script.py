#! python3
# -*- coding: utf-8 -*-
"""Build a 10 x 5 m building shell between "Уровень 1" and "Уровень 2".

Requires the shell_builder package on the pyRevit CPython engine's path.
A shell_config.json next to this script overrides the defaults.
"""

import os

from Autodesk.Revit.UI import TaskDialog

from shell_builder.command import Result, ShellCommand
from shell_builder.config import ShellConfig
from shell_builder.host.revit import RevitDocument

doc = __revit__.ActiveUIDocument.Document

config_path = os.path.join(os.path.dirname(__file__), "shell_config.json")
config = ShellConfig.load(config_path) if os.path.exists(config_path) else ShellConfig()

result = ShellCommand(config).execute(RevitDocument(doc))

if result.status == Result.SUCCEEDED:
    TaskDialog.Show("Build Shell", result.message)
elif result.status == Result.FAILED:
    TaskDialog.Show("Build Shell - Error", result.message)
