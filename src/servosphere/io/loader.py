"""Read servosphere trial exports and attach trial metadata.

Each trial is one delimited text file exported by the servosphere software:
one row per sample with the stimulus code, elapsed milliseconds since the
previous sample, and the incremental x/y displacement of the sphere.

Loading happens in three steps:

1. **Discover**: list trial files in a directory (sorted, so ingestion order
   is reproducible).
2. **Parse**: read each file with pandas, rename instrument headers to the
   canonical columns (stimulus, dT, dx, dy) and check the cleaned-trial
   contract. The trial identity is the file stem.
3. **Merge**: join an external metadata table by trial identity (never by
   row position), drop stimuli outside the keep-list and, optionally,
   split each trial into one trial per stimulus keyed by ``id_stim``.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Union

import pandas as pd

from servosphere.contracts.base import require_columns
from servosphere.contracts.failure import IdentityMismatchError
from servosphere.contracts.trial import assert_cleaned
from servosphere.trials.collection import Trial, TrialCollection

if TYPE_CHECKING:
    from servosphere.schemas import InternalConfig

__all__ = [
    "TrialLoader",
    "list_trials",
    "read_trial",
    "read_trials",
    "read_metadata",
    "merge_metadata",
    "split_trials",
]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def list_trials(directory: PathLike, pattern: str = "*.csv") -> List[Path]:
    """Sorted list of trial files in ``directory`` matching ``pattern``.

    Raises
    ------
    FileNotFoundError
        If the directory does not exist.
    """
    directory = Path(directory).expanduser()
    if not directory.is_dir():
        raise FileNotFoundError(f"Trial directory not found: {directory}")

    files = sorted(p for p in directory.glob(pattern) if p.is_file())
    logger.info("Found %d trial file(s) in %s", len(files), directory)
    return files


def read_trial(path: PathLike, column_map: Optional[Dict[str, str]] = None,
               delimiter: str = ",", trial_id=None) -> Trial:
    """Parse one trial file.

    Parameters
    ----------
    path : str or Path
        Delimited text file.
    column_map : dict, optional
        Instrument header -> canonical column name.
    delimiter : str, default ","
    trial_id : hashable, optional
        Defaults to the file stem.

    Raises
    ------
    MissingColumnError
        If stimulus, dT, dx or dy is absent after renaming.
    ContractViolation
        If dT is missing or negative.
    """
    path = Path(path)
    trial_id = path.stem if trial_id is None else trial_id

    df = pd.read_csv(path, sep=delimiter)
    df.columns = [str(c).strip() for c in df.columns]
    if column_map:
        df = df.rename(columns=column_map)

    assert_cleaned(df, trial_id)
    logger.debug("Read trial %s: %d rows from %s", trial_id, len(df), path.name)
    return Trial(trial_id, df)


def read_trials(directory: PathLike, pattern: str = "*.csv",
                column_map: Optional[Dict[str, str]] = None,
                delimiter: str = ",") -> TrialCollection:
    """Read every trial file in ``directory`` into a TrialCollection."""
    paths = list_trials(directory, pattern)
    return TrialCollection(
        [read_trial(p, column_map=column_map, delimiter=delimiter) for p in paths]
    )


def read_metadata(path: PathLike, id_column: str = "id", delimiter: str = ",") -> pd.DataFrame:
    """Read the trial metadata table.

    The identity column is read as strings so it matches file-stem trial ids.
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Metadata file not found: {path}")

    metadata = pd.read_csv(path, sep=delimiter, dtype={id_column: str})
    metadata.columns = [str(c).strip() for c in metadata.columns]
    require_columns(metadata, [id_column], f"metadata file {path.name}", stage="Merge")
    logger.info("Read metadata for %d row(s) from %s", len(metadata), path)
    return metadata


def _metadata_lookup(metadata: pd.DataFrame, id_column: str, scoped: bool) -> dict:
    """Map trial identity (or (identity, stimulus)) to one metadata row."""
    keys = metadata[id_column].astype(str)
    if scoped:
        keys = list(zip(keys, metadata["stimulus"].astype(str)))
    else:
        keys = list(keys)

    key_series = pd.Series(keys, dtype=object)
    duplicates = sorted({str(k) for k in key_series[key_series.duplicated()]})
    if duplicates:
        raise IdentityMismatchError(
            f"Metadata has more than one row for: {duplicates}",
            identities=duplicates,
        )
    return {key: row for key, (_, row) in zip(keys, metadata.iterrows())}


def _attach(df: pd.DataFrame, row: pd.Series, id_column: str) -> pd.DataFrame:
    df = df.copy()
    for col, value in row.items():
        if col == "stimulus":
            continue
        df["id" if col == id_column else col] = value
    return df


def _retain_stimuli(trial: Trial, keep: Optional[list]) -> Optional[pd.DataFrame]:
    """Rows of ``trial`` whose stimulus is in ``keep``; None if none remain."""
    df = trial.data
    if keep is None:
        return df
    df = df[df["stimulus"].isin(keep)]
    if df.empty:
        logger.warning("Trial %s has no rows with stimulus in %s; dropped",
                       trial.trial_id, keep)
        return None
    return df


def _split_stimuli(trial_key: str, df: pd.DataFrame):
    """Yield (stimulus, id_stim, rows) per stimulus, in order of first appearance."""
    for stimulus, part in df.groupby("stimulus", sort=False):
        yield stimulus, f"{trial_key}_{stimulus}", part


def _tag_split(part: pd.DataFrame, trial_key: str, id_stim: str) -> pd.DataFrame:
    part = part.copy()
    part["id"] = trial_key
    part["id_stim"] = id_stim
    return part


def split_trials(collection: TrialCollection, keep_stimuli: Optional[Iterable] = None,
                 split_by_stimulus: bool = False) -> TrialCollection:
    """Apply the stimulus keep-list and optional per-stimulus split without metadata.

    Trials stay keyed by file stem, or by ``id_stim = "<stem>_<stimulus>"``
    when split. Trials with no retained rows are dropped with a warning.
    """
    keep = None if keep_stimuli is None else list(keep_stimuli)

    trials = []
    for trial in collection:
        df = _retain_stimuli(trial, keep)
        if df is None:
            continue
        trial_key = str(trial.trial_id)
        if not split_by_stimulus:
            trials.append(trial.with_data(df))
            continue
        for _, id_stim, part in _split_stimuli(trial_key, df):
            trials.append(Trial(id_stim, _tag_split(part, trial_key, id_stim)))

    key = "id_stim" if split_by_stimulus else collection.key
    logger.info("Selected %d trial(s) keyed by %s", len(trials), key)
    return TrialCollection(trials, key=key)


def merge_metadata(collection: TrialCollection, metadata: pd.DataFrame,
                   id_column: str = "id", keep_stimuli: Optional[Iterable] = None,
                   split_by_stimulus: bool = False) -> TrialCollection:
    """Join metadata onto trials by identity.

    Parameters
    ----------
    collection : TrialCollection
        Parsed trials keyed by file stem.
    metadata : pd.DataFrame
        One row per trial (``id_column``), or one row per trial and
        stimulus when it has a ``stimulus`` column and trials are split.
    id_column : str, default "id"
        Identity column of ``metadata``. It is stored as ``id`` on trials.
    keep_stimuli : iterable, optional
        Stimulus codes to retain. Rows with other codes are dropped, and a
        trial left with no rows is dropped with a warning.
    split_by_stimulus : bool, default False
        Split each trial into one trial per retained stimulus value, in order
        of first appearance, keyed by ``id_stim = "<id>_<stimulus>"``.

    Returns
    -------
    TrialCollection
        Keyed by ``id``, or by ``id_stim`` when split.

    Raises
    ------
    IdentityMismatchError
        If a trial (or trial/stimulus pair) has no metadata row, or the
        metadata has duplicate keys.
    """
    require_columns(metadata, [id_column], "metadata table", stage="Merge")
    scoped = split_by_stimulus and "stimulus" in metadata.columns
    lookup = _metadata_lookup(metadata, id_column, scoped)
    keep = None if keep_stimuli is None else list(keep_stimuli)

    merged = []
    unmatched = []
    for trial in collection:
        df = _retain_stimuli(trial, keep)
        if df is None:
            continue

        trial_key = str(trial.trial_id)
        if not split_by_stimulus:
            row = lookup.get(trial_key)
            if row is None:
                unmatched.append(trial_key)
                continue
            merged.append(Trial(trial.trial_id, _attach(df, row, id_column)))
            continue

        for stimulus, id_stim, part in _split_stimuli(trial_key, df):
            row = lookup.get((trial_key, str(stimulus)) if scoped else trial_key)
            if row is None:
                unmatched.append(id_stim)
                continue
            part = _tag_split(_attach(part, row, id_column), trial_key, id_stim)
            merged.append(Trial(id_stim, part))

    if unmatched:
        raise IdentityMismatchError(
            f"No metadata row for trial(s): {unmatched}",
            identities=unmatched,
        )

    key = "id_stim" if split_by_stimulus else "id"
    logger.info("Merged metadata: %d trial(s) keyed by %s", len(merged), key)
    return TrialCollection(merged, key=key)


class TrialLoader:
    """Config-driven ingestion: discover, parse and merge trials.

    Examples
    --------
    >>> loader = TrialLoader(config)
    >>> collection = loader.load("data/trials", "data/metadata.csv")
    """

    def __init__(self, config: "InternalConfig"):
        self.config = config
        self.pattern = config.ingest.file_pattern
        self.delimiter = config.ingest.delimiter
        self.column_map = dict(config.ingest.column_map)
        self.id_column = config.ingest.id_column
        self.keep_stimuli = config.ingest.keep_stimuli
        self.split_by_stimulus = config.ingest.split_by_stimulus

    def load(self, input_dir: PathLike, metadata_file: Optional[PathLike] = None) -> TrialCollection:
        """Read all trials and, if given, merge the metadata file.

        Without metadata, trials are keyed by file stem (or by
        ``<stem>_<stimulus>`` when split) and no columns are attached.
        """
        collection = read_trials(input_dir, self.pattern, self.column_map, self.delimiter)

        if metadata_file is None:
            return split_trials(collection, self.keep_stimuli, self.split_by_stimulus)

        metadata = read_metadata(metadata_file, self.id_column, self.delimiter)
        return merge_metadata(
            collection,
            metadata,
            id_column=self.id_column,
            keep_stimuli=self.keep_stimuli,
            split_by_stimulus=self.split_by_stimulus,
        )
