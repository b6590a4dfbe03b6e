# desklock.modules - event sources and the plumbing they run on
