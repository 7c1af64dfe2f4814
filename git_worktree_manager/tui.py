"""Interactive TUI for git-worktree-manager using Textual."""

import asyncio
from typing import Optional, Set

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Input, Static, Tree

from .__version__ import __version__
from .core import WorktreeManager
from .formatters import format_node_label
from .logging_config import get_logger
from .models.tree import NodeKind, RepositoryNode, TreeNode, children_of
from .services.git.operations import OperationResult
from .services.model import Snapshot

logger = get_logger(__name__)


class ConfirmScreen(ModalScreen[bool]):
    """Modal confirmation dialog."""

    DEFAULT_CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 80%;
        height: auto;
        border: thick $background 80%;
        background: $surface;
        padding: 1 2;
    }

    #confirm-message {
        width: 100%;
        height: auto;
        padding: 1 0;
    }

    #button-container {
        width: 100%;
        height: auto;
        align: center middle;
        padding: 1 0;
    }

    Button {
        margin: 0 1;
    }
    """

    def __init__(self, message: str, confirm_label: str = "Yes"):
        super().__init__()
        self.message = message
        self.confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Static(self.message, id="confirm-message")
            with Container(id="button-container"):
                yield Button(self.confirm_label, variant="error", id="yes")
                yield Button("Cancel", variant="primary", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        self.dismiss(event.button.id == "yes")


class InfoScreen(ModalScreen):
    """Blocking, dismissible message (used for operation errors)."""

    DEFAULT_CSS = """
    InfoScreen {
        align: center middle;
    }

    #info-dialog {
        width: 80%;
        height: auto;
        border: thick $error 80%;
        background: $surface;
        padding: 1 2;
    }

    #info-content {
        width: 100%;
        height: auto;
        padding: 1 0;
    }

    #info-button-container {
        width: 100%;
        height: auto;
        align: center middle;
        padding: 1 0;
    }
    """

    BINDINGS = [Binding("escape", "close", "Close")]

    def __init__(self, info: str):
        super().__init__()
        self.info = info

    def compose(self) -> ComposeResult:
        with Vertical(id="info-dialog"):
            # Plain text: git errors may contain square brackets
            yield Static(self.info, id="info-content", markup=False)
            with Container(id="info-button-container"):
                yield Button("Close", variant="primary", id="close")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        self.dismiss()

    def action_close(self) -> None:
        self.dismiss()


class InputScreen(ModalScreen[Optional[str]]):
    """Single-line text prompt; dismisses with the entered text or None."""

    DEFAULT_CSS = """
    InputScreen {
        align: center middle;
    }

    #input-dialog {
        width: 70%;
        height: auto;
        border: thick $background 80%;
        background: $surface;
        padding: 1 2;
    }

    #input-prompt {
        width: 100%;
        height: auto;
        padding: 0 0 1 0;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, prompt: str, placeholder: str = ""):
        super().__init__()
        self.prompt = prompt
        self.placeholder = placeholder

    def compose(self) -> ComposeResult:
        with Vertical(id="input-dialog"):
            yield Static(self.prompt, id="input-prompt")
            yield Input(placeholder=self.placeholder, id="input-value")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        self.dismiss(value or None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class WorktreeManagerApp(App[Optional[str]]):
    """Tree of repositories, worktrees and branches.

    The app exits with the path of a worktree the user chose to switch to,
    or None.
    """

    TITLE = "git-worktree-manager"
    SUB_TITLE = f"v{__version__}"

    DEFAULT_CSS = """
    #worktree-tree {
        height: 1fr;
    }

    #status-bar {
        height: 1;
        background: $panel;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("c", "create_worktree", "New Worktree"),
        Binding("d", "remove_worktree", "Remove Worktree"),
        Binding("enter", "select", "Switch", show=False),
    ]

    def __init__(self, manager: WorktreeManager):
        super().__init__()
        self.manager = manager
        self.snapshot: Snapshot = ()
        self.manager.set_workspace_opener(self._open_workspace)

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield Header(show_clock=False)
        tree: Tree = Tree("Workspace", id="worktree-tree")
        tree.show_root = False
        tree.auto_expand = False
        yield tree
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.manager.add_listener(self._on_model_changed)
        tree = self.query_one(Tree)
        tree.loading = True
        self.load_repositories()

    def on_unmount(self) -> None:
        self.manager.remove_listener(self._on_model_changed)

    # Model updates

    def _on_model_changed(self, snapshot: Snapshot) -> None:
        """Model listener; runs on whichever thread performed the refresh."""
        try:
            self.call_from_thread(self._apply_snapshot, snapshot)
        except RuntimeError as e:
            # App already shutting down
            logger.debug(f"Ignoring model change: {e}")

    @work(exclusive=True, group="load", thread=False)
    async def load_repositories(self) -> None:
        """Load the first snapshot in the background."""
        tree = self.query_one(Tree)
        try:
            snapshot = await asyncio.to_thread(self.manager.get_repositories)
            self._apply_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Error loading repositories: {e}", exc_info=True)
            self.push_screen(InfoScreen(f"Error loading repositories:\n\n{e}"))
        finally:
            tree.loading = False

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        """Rebuild the tree from a snapshot, keeping expanded worktrees expanded."""
        tree = self.query_one(Tree)
        expanded = self._expanded_keys(tree)
        cursor_key = tree.cursor_node.data.key if tree.cursor_node and tree.cursor_node.data else None

        self.snapshot = snapshot
        tree.clear()
        cursor_target = None
        for repository in snapshot:
            repo_data = RepositoryNode(repository)
            repo_node = tree.root.add(format_node_label(repo_data), data=repo_data, expand=True)
            if repo_data.key == cursor_key:
                cursor_target = repo_node
            current = repository.current_worktree
            for worktree_data in children_of(repo_data, lambda _path: []):
                worktree_node = repo_node.add(
                    format_node_label(worktree_data), data=worktree_data, allow_expand=True
                )
                if worktree_data.key == cursor_key:
                    cursor_target = worktree_node
                elif cursor_key is None and cursor_target is None and worktree_data.worktree == current:
                    # First load: start on the worktree the workspace is in
                    cursor_target = worktree_node
                if worktree_data.key in expanded:
                    worktree_node.expand()

        if cursor_target is not None:
            # New nodes get their line numbers when the tree redraws
            self.call_after_refresh(tree.move_cursor, cursor_target)
        self._update_status()

    @staticmethod
    def _expanded_keys(tree: Tree) -> Set[str]:
        keys = set()
        for repo_node in tree.root.children:
            for worktree_node in repo_node.children:
                if worktree_node.is_expanded and worktree_node.data is not None:
                    keys.add(worktree_node.data.key)
        return keys

    def _update_status(self) -> None:
        repositories = len(self.snapshot)
        worktrees = sum(len(repo.worktrees) for repo in self.snapshot)
        if repositories == 0:
            text = "No git repositories found in the workspace"
        else:
            text = f"{repositories} repositories, {worktrees} worktrees"
        self.query_one("#status-bar", Static).update(text)

    # Lazy branch loading

    def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
        data: Optional[TreeNode] = event.node.data
        if data is not None and data.kind is NodeKind.WORKTREE:
            self.load_branches(event.node)

    @work(group="branches", thread=False)
    async def load_branches(self, node) -> None:
        """Query the branches of a worktree each time its node is expanded."""
        children = await asyncio.to_thread(children_of, node.data, self.manager.get_branches)
        node.remove_children()
        if not children:
            node.add_leaf("(no branches)")
            return
        for branch_data in children:
            node.add_leaf(format_node_label(branch_data), data=branch_data)

    # Actions

    def _selected(self) -> Optional[TreeNode]:
        node = self.query_one(Tree).cursor_node
        return node.data if node is not None else None

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        self._activate(event.node.data)

    def action_select(self) -> None:
        self._activate(self._selected())

    def _activate(self, data: Optional[TreeNode]) -> None:
        if data is None:
            return
        if data.kind is NodeKind.WORKTREE:
            result = self.manager.switch_to_worktree(data.worktree.path)
            if not result.success:
                self.push_screen(InfoScreen(result.message or "Failed to open worktree"))
        elif data.kind is NodeKind.BRANCH:
            if data.branch.is_current:
                self.notify(f"{data.branch.name} is already checked out")
                return
            self.run_operation(
                self.manager.switch_branch, data.worktree_path, data.branch.name, data.branch.is_remote
            )

    def _open_workspace(self, path: str) -> None:
        self.exit(path)

    def action_refresh(self) -> None:
        self.refresh_model()

    @work(exclusive=True, group="load", thread=False)
    async def refresh_model(self) -> None:
        await asyncio.to_thread(self.manager.refresh)
        self.notify("✓ Worktrees refreshed", severity="information")

    def action_create_worktree(self) -> None:
        def on_branch(branch: Optional[str]) -> None:
            if not branch:
                return

            def on_path(path: Optional[str]) -> None:
                if path:
                    self.run_operation(self.manager.create_worktree, branch, path)

            self.push_screen(InputScreen("Enter path for new worktree", "../my-feature"), on_path)

        self.push_screen(InputScreen("Enter branch name for new worktree", "feature/my-feature"), on_branch)

    def action_remove_worktree(self) -> None:
        data = self._selected()
        if data is None or data.kind is not NodeKind.WORKTREE:
            self.notify("Select a worktree to remove", severity="warning")
            return
        if data.worktree.is_current:
            self.notify("The current worktree cannot be removed", severity="warning")
            return

        path = data.worktree.path

        def on_confirm(confirmed: Optional[bool]) -> None:
            if confirmed:
                self.run_operation(self.manager.remove_worktree, path)

        self.push_screen(ConfirmScreen(f"Remove worktree at {path}?", confirm_label="Remove"), on_confirm)

    @work(exclusive=True, group="operation", thread=False)
    async def run_operation(self, operation, *args) -> None:
        """Run a mutation off the event loop and report its outcome."""
        result: OperationResult = await asyncio.to_thread(operation, *args)
        if result.success:
            self.notify(result.message or "Done", severity="information")
        else:
            self.push_screen(InfoScreen(result.message or "Operation failed"))

    async def action_quit(self) -> None:
        """Cancel running workers before exiting."""
        self.workers.cancel_all()
        self.exit()
