"""Engine tunables. All distances are canvas units, all times are ticks."""

# Canvas geometry
LANE_COUNT = 3
LANE_WIDTH = 120
GAME_WIDTH = LANE_WIDTH * LANE_COUNT
GAME_HEIGHT = 600
PLAYER_Y = 500
SPAWN_Y = -100
CULL_Y = GAME_HEIGHT + 100
START_LANE = 1

# Scroll
INITIAL_SPEED = 6.0
SPEED_INCREMENT = 0.0005

# Spawning
MIN_SPAWN_INTERVAL = 25
SPAWN_BASE = 60
DOUBLE_LANE_THRESHOLD = 0.75   # random() above this fills 2 lanes
COLLECTIBLE_THRESHOLD = 0.8    # random() above this spawns a collectible

# Player arcs
ARC_STEP = 0.04
JUMP_HEIGHT = 100.0
JUMP_CLEARANCE = 40.0
SLIDE_SCALE_X = 1.3
SLIDE_SCALE_Y = 0.6

# Collision windows
OBSTACLE_WINDOW = 40
COLLECTIBLE_WINDOW = 50

# Scoring
PASSIVE_SCORE_EVERY = 10
MULTIPLIER_EVERY = 1000

# Particles
PARTICLE_DECAY = 0.02
PARTICLE_BURST = 6
PARTICLE_SPREAD = 10.0
LABEL_RISE = -2.0
