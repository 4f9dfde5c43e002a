# workshot

Save your development context and come back to it later.

When you get interrupted or need to switch tasks, `workshot` records where
you were. It saves the working directory and the git branch, remote and short
commit hash. It notes whether the tree had uncommitted changes and how many
stashes there were. It also keeps your most recent shell commands. Later you
can look the snapshot up again and get the commands that take you back.

Snapshots are stored as readable JSON in `~/.workshot/shots/<name>.json`. A
small index at `~/.workshot/index.json` makes listing fast. If the index is
missing or damaged, it is rebuilt from the snapshot files, and any snapshot
that cannot be read is skipped with a warning.

## Installation

```
pip install .
```

## Usage

Save the current context:

```
workshot freeze my-work
```

If a snapshot with that name already exists, `freeze` refuses to overwrite
it. Delete the old one first. The `--force` / `-f` flag is accepted but does
not change this.

List saved snapshots, newest first, with their age, directory and branch
(alias: `ls`):

```
workshot list
```

Show everything stored in a snapshot, or the raw JSON (alias: `info`):

```
workshot show my-work
workshot show my-work --json
```

Restore a snapshot:

```
workshot restore my-work
```

This checks out the saved git branch if you are inside a git repository and
on a different branch. It then prints the saved context, the commands that
bring a shell back to it, and any warnings, such as a failed checkout.

A program cannot change its parent shell's directory. To really `cd` there,
print only the commands and evaluate them:

```
eval "$(workshot restore my-work --commands)"
```

Delete a snapshot (aliases: `rm`, `remove`). You are asked to confirm unless
you pass `--force` / `-f`:

```
workshot delete my-work
workshot delete my-work --force
```

`workshot --version` prints the version.

## Recent commands and privacy

Recent commands are read from the first history file that has any usable
entries. On Unix-like systems these are `~/.zsh_history`, `~/.bash_history`
and `~/.history`. On Windows the PowerShell PSReadLine history comes first,
followed by `~/.bash_history` and `~/.history`. Extended zsh history prefixes
are stripped, and at most the last 20 commands are kept. `show` and `restore`
display the last 10 of them.

Lines that look like they hold credentials are dropped before anything is
saved. This covers password, secret, token and key assignments, exported
cloud or API credentials, bearer tokens, authorization headers, and database
URLs that carry a password.

Recent commands are only shown. They are never run again.

## Library use

The pieces can be used from Python as well:

```python
from workshot.cli import build_plugin_manager
from workshot.storage import Storage
from workshot.snapshot import freeze, restore

manager = build_plugin_manager()
store = Storage()            # or Storage(home="/some/dir")
freeze("my-work", manager, store)
snap, errors = restore("my-work", manager, store)
```

`restore` changes the current process's directory to the saved one. It
returns the snapshot together with a list of non-fatal problems. Failures to
freeze or load raise `workshot.snapshot.SnapshotError`. `Storage` raises
`StorageError`, and `SnapshotNotFoundError` for unknown names.

You can add your own capture plugins by subclassing `workshot.types.Capturer`.
Set its `name` and `priority` and implement `capture`, `restore` and
`can_restore`, then register it with `Manager.register`. Plugins run in order
of priority, lowest first. A failing plugin is skipped unless every plugin
fails.

## What it does not do

- It does not record the active editor or open files. `show` displays an
  editor only if a snapshot's `plugin_data` holds an `editor` entry, and no
  built-in plugin writes one.
- It does not restore running processes or rerun commands.
- It cannot change the directory of the shell that started it. Use
  `restore --commands` with `eval` for that.