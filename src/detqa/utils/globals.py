"""Module which contains all global variables shared across the project."""

# Particle species index used by the PID responses and the QA histograms
ELEC_SPECIES = 0
MUON_SPECIES = 1
PION_SPECIES = 2
KAON_SPECIES = 3
PROT_SPECIES = 4

# Number of charged species the PID responses are defined for
N_SPECIES = 5

# Mapping between particle PDG code and species index
PDG_TO_SPECIES = {
    11:   ELEC_SPECIES,
    -11:  ELEC_SPECIES,
    13:   MUON_SPECIES,
    -13:  MUON_SPECIES,
    211:  PION_SPECIES,
    -211: PION_SPECIES,
    321:  KAON_SPECIES,
    -321: KAON_SPECIES,
    2212: PROT_SPECIES,
    -2212: PROT_SPECIES
}

SPECIES_TO_PDG = {v: abs(k) for k, v in PDG_TO_SPECIES.items()}

# Species names (used to build histogram names and titles)
SPECIES_NAMES = {
    ELEC_SPECIES: 'electron',
    MUON_SPECIES: 'muon',
    PION_SPECIES: 'pion',
    KAON_SPECIES: 'kaon',
    PROT_SPECIES: 'proton'
}

# Particle masses
ELEC_MASS = 0.000510999 # [GeV/c^2]
MUON_MASS = 0.105658    # [GeV/c^2]
PION_MASS = 0.139570    # [GeV/c^2]
KAON_MASS = 0.493677    # [GeV/c^2]
PROT_MASS = 0.938272    # [GeV/c^2]

SPECIES_MASSES = {
    ELEC_SPECIES: ELEC_MASS,
    MUON_SPECIES: MUON_MASS,
    PION_SPECIES: PION_MASS,
    KAON_SPECIES: KAON_MASS,
    PROT_SPECIES: PROT_MASS
}

# Masses of the particles which can be reconstructed as daughters, by |PDG|
PDG_MASSES = {
    11:   ELEC_MASS,
    13:   MUON_MASS,
    211:  PION_MASS,
    321:  KAON_MASS,
    2212: PROT_MASS
}

# Number of TRD layers and maximum number of charge slices per tracklet
TRD_N_PLANES = 6
TRD_N_SLICES = 8

# Track status bits
TPC_IN  = 0x0010
TPC_OUT = 0x0020
TRD_OUT = 0x0200

# Number of EMCal cells in one supermodule (24 x 48 towers)
EMCAL_CELLS_PER_SM = 1152

# Sentinel values of unset quantities
INVAL_MOM = -1.
INVAL_VTX = 99.
