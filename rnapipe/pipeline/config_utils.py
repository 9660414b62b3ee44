"""Loads configurations from .yaml files and builds the run configuration.

The run configuration is created once at startup and handed to every part
of the pipeline; nothing downstream modifies it.
"""
import collections
import glob
import os
import sys

import toolz as tz
import yaml


class CmdNotFound(Exception):
    pass

LIBRARY_TYPES = {"SE": "single", "PE": "paired"}
SCHEDULERS = ["sge", "slurm"]

RunConfig = collections.namedtuple(
    "RunConfig",
    ["input_dir", "reference", "annotation", "layout", "out_dir",
     "cluster", "scheduler", "queue", "debug", "trimmomatic_version",
     "quantify", "transcript_counts", "build_transcriptome", "collate",
     "poll_interval", "timeout", "submit_delay", "config"])

DEFAULTS = {"cluster": False, "scheduler": "sge", "queue": None, "debug": False,
            "trimmomatic_version": None, "quantify": False, "transcript_counts": False,
            "build_transcriptome": False, "collate": True, "poll_interval": 300,
            "timeout": None, "submit_delay": 2, "config": None}

def make_run_config(input_dir, reference, annotation, library_type, out_dir, **kwargs):
    """Build the immutable configuration for a run, validating inputs.

    library_type is the command line SE/PE value. Optional settings not
    supplied fall back to `DEFAULTS`; `config` is the loaded system YAML.
    """
    for name, val in [("input directory", input_dir), ("reference", reference),
                      ("annotation", annotation), ("output directory", out_dir)]:
        if not val:
            raise ValueError("Missing required %s" % name)
    if str(library_type).upper() not in LIBRARY_TYPES:
        raise ValueError("Library type must be one of %s, got: %s" %
                         (", ".join(sorted(LIBRARY_TYPES)), library_type))
    unknown = set(kwargs) - set(DEFAULTS)
    if unknown:
        raise ValueError("Unexpected run configuration options: %s" % ", ".join(sorted(unknown)))
    opts = dict(DEFAULTS)
    opts.update({k: v for k, v in kwargs.items() if v is not None})
    if opts["scheduler"] not in SCHEDULERS:
        raise ValueError("Unsupported scheduler %s: expected one of %s" %
                         (opts["scheduler"], ", ".join(SCHEDULERS)))
    # transcript level counts are collated from the salmon outputs
    if opts["transcript_counts"]:
        opts["quantify"] = True
    if opts["config"] is None:
        opts["config"] = {"resources": {}}
    for fname in [reference, annotation]:
        if not os.path.isfile(fname):
            raise ValueError("Input file not found: %s" % fname)
    if not os.path.isdir(input_dir):
        raise ValueError("Input directory not found: %s" % input_dir)
    return RunConfig(input_dir=os.path.abspath(input_dir),
                     reference=os.path.abspath(reference),
                     annotation=os.path.abspath(annotation),
                     layout=LIBRARY_TYPES[str(library_type).upper()],
                     out_dir=os.path.abspath(out_dir), **opts)

def needs_transcripts(run_config):
    return run_config.quantify or run_config.build_transcriptome

# ## Retrieval functions

def load_system_config(config_file=None):
    """Load a YAML system configuration, returning an empty one when not supplied.
    """
    if config_file is None:
        return {"resources": {}}
    if not os.path.exists(config_file):
        raise ValueError("Could not find input system configuration file %s" % config_file)
    config = load_config(config_file)
    config["rnapipe_system"] = os.path.abspath(config_file)
    return config

def load_config(config_file):
    """Load YAML config file, replacing environmental variables.
    """
    with open(config_file) as in_handle:
        config = yaml.safe_load(in_handle) or {}
    config = _expand_paths(config)
    if 'resources' not in config:
        config['resources'] = {}
    # lowercase resource names, the preferred way to specify, for back-compatibility
    newr = {}
    for k, v in config["resources"].items():
        if k.lower() != k:
            newr[k.lower()] = v
    config["resources"].update(newr)
    return config

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(config[field], dict):
            config[field] = _expand_paths(config[field])
        else:
            config[field] = expand_path(setting)
    return config

def expand_path(path):
    """ Combines os.path.expandvars with replacing ~ with $HOME.
    """
    try:
        return os.path.expandvars(path.replace("~", "$HOME"))
    except AttributeError:
        return path

def get_resources(name, config):
    """Retrieve resources for a program, pulling from multiple config sources.
    """
    return tz.get_in(["resources", name], config,
                     tz.get_in(["resources", "default"], config, {})) or {}

def get_cores(name, config, default=1):
    return int(get_resources(name, config).get("cores", default))

def get_options(name, config):
    return " ".join(str(x) for x in get_resources(name, config).get("options", []))

def get_program(name, config, ptype="cmd", default=None):
    """Retrieve program information from the configuration.

    The preferred location for program information is in `resources`,
    falling back to the program name on the PATH.
    """
    try:
        pconfig = config.get("resources", {})[name]
    except KeyError:
        pconfig = {}
    if ptype == "cmd":
        return _get_program_cmd(name, pconfig, config, default)
    elif ptype == "dir":
        return _get_program_dir(name, pconfig)
    else:
        raise ValueError("Don't understand program type: %s" % ptype)

def _get_check_program_cmd(fn):
    def wrap(name, pconfig, config, default):
        is_ok = lambda f: os.path.isfile(f) and os.access(f, os.X_OK)
        # support programs installed alongside the running python
        if is_ok(os.path.join(os.path.dirname(sys.executable), name)):
            return os.path.join(os.path.dirname(sys.executable), name)
        program = expand_path(fn(name, pconfig, config, default))
        if is_ok(program):
            return program
        # search the PATH now
        for adir in os.environ.get('PATH', '').split(":"):
            if is_ok(os.path.join(adir, program)):
                return os.path.join(adir, program)
        raise CmdNotFound(" ".join(map(repr, (fn.__name__, name, pconfig, default))))
    return wrap

@_get_check_program_cmd
def _get_program_cmd(name, pconfig, config, default):
    """Retrieve commandline of a program.
    """
    if pconfig is None:
        return name
    elif isinstance(pconfig, str):
        return pconfig
    elif "cmd" in pconfig:
        return pconfig["cmd"]
    elif default is not None:
        return default
    else:
        return name

def _get_program_dir(name, config):
    """Retrieve directory for a program (local installs/java jars).
    """
    if config is None:
        raise ValueError("Could not find directory in config for %s" % name)
    elif isinstance(config, str):
        return config
    elif "dir" in config:
        return expand_path(config["dir"])
    else:
        raise ValueError("Could not find directory in config for %s" % name)

def get_jar(base_name, dname):
    """Retrieve a jar in the provided directory
    """
    jars = glob.glob(os.path.join(expand_path(dname), "%s*.jar" % base_name))

    if len(jars) == 1:
        return jars[0]
    elif len(jars) > 1:
        raise ValueError("Found multiple jars for %s in %s. Need single jar: %s" %
                         (base_name, dname, jars))
    else:
        raise ValueError("Could not find java jar %s in %s" %
                         (base_name, dname))
