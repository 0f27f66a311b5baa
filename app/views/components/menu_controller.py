"""MenuController: Manages menu creation and action connections."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtGui import QAction
from PySide6.QtWidgets import QMainWindow, QMenuBar, QToolBar

# Actions mirrored on the toolbar, in order
TOOLBAR_ACTIONS: list[str] = ["refresh", "delete", "select_by_age", "open_project", "open_version"]


class MenuController:
    """Manages main window menu and toolbar creation and action connections.

    This class encapsulates all menu-related functionality including:
    - Menu structure creation
    - Toolbar mirroring of the common actions
    - Action-to-handler connection management
    """

    def __init__(self, main_window: QMainWindow) -> None:
        """Initialize with main window reference.

        Args:
            main_window: The QMainWindow to create menus for
        """
        self.window = main_window
        self.actions: dict[str, QAction] = {}

    def setup_menus(self) -> dict[str, QAction]:
        """Create all menus and the toolbar and return action references.

        Returns:
            Dictionary mapping action names to QAction instances
        """
        menubar = QMenuBar(self.window)

        # File Menu
        file_menu = menubar.addMenu("File")
        self.actions["refresh"] = file_menu.addAction("Refresh")
        self.actions["delete"] = file_menu.addAction("Delete Selected…")
        file_menu.addSeparator()
        self.actions["open_project"] = file_menu.addAction("Open Project Folder")
        self.actions["open_version"] = file_menu.addAction("Open Version Folder")
        file_menu.addSeparator()
        self.actions["exit"] = file_menu.addAction("Exit")

        # Select Menu
        select_menu = menubar.addMenu("Select")
        self.actions["select_all"] = select_menu.addAction("Select All")
        self.actions["select_none"] = select_menu.addAction("Select None")
        self.actions["select_by_age"] = select_menu.addAction("Select by Age…")

        # Log Menu
        log_menu = menubar.addMenu("Log")
        self.actions["open_latest_log"] = log_menu.addAction("Open Latest Log")
        self.actions["open_log_directory"] = log_menu.addAction("Open Log Directory")

        self.window.setMenuBar(menubar)

        toolbar = QToolBar("Main", self.window)
        toolbar.setMovable(False)
        for name in TOOLBAR_ACTIONS:
            toolbar.addAction(self.actions[name])
        self.window.addToolBar(toolbar)

        return self.actions

    def connect_actions(self, handlers: dict[str, Callable]) -> None:
        """Connect menu actions to their handler methods.

        Args:
            handlers: Dictionary mapping action names to handler callables
        """
        for name, action in self.actions.items():
            if name in handlers:
                action.triggered.connect(handlers[name])

        if "exit" not in handlers:
            # Default exit behavior
            self.actions["exit"].triggered.connect(self.window.close)

    def enable_action(self, name: str, enabled: bool = True) -> None:
        """Enable or disable a specific action.

        Args:
            name: Action name
            enabled: Whether to enable the action
        """
        action = self.actions.get(name)
        if action:
            action.setEnabled(enabled)
