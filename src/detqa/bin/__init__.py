"""detqa command line interface.

The `detqa` command loads a YAML configuration file, applies the
command-line overrides and runs the :class:`Driver`::

    detqa -c config/qa.yaml -s events_*.h5 -o qa.h5
    detqa -c config/qa.yaml -S file_list.txt --set qa.trd_pid.min_ntracklets=5
"""
