"""
Simulation - ground-truth buildings, sensing and robot kinematics

  environment.py           ASCII building layouts (numpy ground truth)
  sensors.py               Ray-cast sensing into each robot's occupancy map
  physics.py               Tile kinematics with wall collision
  sim_robot_controller.py  RobotControllerInterface for simulated robots
  robot_manager.py         Multi-robot simulation orchestrator
"""
